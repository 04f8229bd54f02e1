import pytest

from rcv_election.util import DL2LD, AuditLog, join_names, plural


def test_audit_log():

    audit_log = AuditLog()
    audit_log.write("first")
    audit_log.extend(["second", "third"])

    assert len(audit_log) == 3
    assert list(audit_log) == ["first", "second", "third"]
    assert audit_log.text() == "first\nsecond\nthird"


def test_audit_log_rejects_multiple_lines():

    audit_log = AuditLog()

    with pytest.raises(RuntimeError):
        audit_log.write("one\ntwo")

    assert len(audit_log) == 0


@pytest.mark.parametrize("n, expected", [(0, "0 voters"), (1, "1 voter"), (2, "2 voters")])
def test_plural(n, expected):
    assert plural(n, "voter") == expected


def test_join_names():
    assert join_names(["A", "B"]) == "A, B"


def test_DL2LD():
    assert DL2LD({"a": [1, 2], "b": [3, 4]}) == [{"a": 1, "b": 3}, {"a": 2, "b": 4}]
