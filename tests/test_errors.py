import pytest

from unified_intelligence.errors import (
    ChainOperationError,
    DuplicateThoughtError,
    InternalError,
    InvalidActionError,
    NotFoundError,
    PoolCreationError,
    RateLimitError,
    SerializationError,
    StorageError,
    UnauthorizedError,
    UnifiedIntelligenceError,
    ValidationError,
)


def test_rate_limit_message():
    assert str(RateLimitError()) == "Rate limit exceeded"


def test_unauthorized_message():
    assert str(UnauthorizedError()) == "Unauthorized access"


def test_storage_error_redis_prefix():
    err = StorageError("connection refused")
    assert str(err) == "Redis error: " + "connection refused"
    assert err.detail == "connection refused"
    assert err.pool is False


def test_storage_error_pool_prefix():
    err = StorageError("timed out", pool=True)
    assert str(err).startswith("Connection pool error: ")
    assert str(err).endswith("timed out")
    assert err.pool is True


def test_pool_creation_error():
    err = PoolCreationError("bad url")
    assert str(err).startswith("Connection pool creation error: ")
    assert err.detail == "bad url"


def test_serialization_error():
    err = SerializationError("unexpected eof")
    assert str(err).startswith("Serialization error: ")
    assert "unexpected eof" in str(err)


def test_validation_error_fields():
    err = ValidationError("chain_id", "too long")
    assert err.field == "chain_id"
    assert err.reason == "too long"
    assert str(err).startswith("Validation error: chain_id")
    assert str(err).endswith("too long")


def test_invalid_action_and_chain_operation():
    assert InvalidActionError("jump").action == "jump"
    assert str(InvalidActionError("jump")).startswith("Invalid action: ")
    assert str(ChainOperationError("x")).startswith("Chain operation failed: ")


def test_internal_and_not_found():
    assert InternalError("boom").detail == "boom"
    assert str(InternalError("boom")).startswith("Internal error: ")
    assert NotFoundError("thought 1").what == "thought 1"
    assert str(NotFoundError("thought 1")).startswith("Not found: ")


def test_duplicate_thought_error():
    err = DuplicateThoughtError("CC", "hello")
    assert err.instance == "CC"
    assert err.preview == "hello"
    assert str(err).startswith("Duplicate thought detected for instance CC")
    assert str(err).endswith("hello")


@pytest.mark.parametrize(
    "error",
    [
        StorageError("a"),
        PoolCreationError("a"),
        SerializationError("a"),
        ValidationError("f", "r"),
        InvalidActionError("a"),
        ChainOperationError("a"),
        RateLimitError(),
        UnauthorizedError(),
        InternalError("a"),
        NotFoundError("a"),
        DuplicateThoughtError("i", "p"),
    ],
)
def test_all_errors_share_base(error):
    with pytest.raises(UnifiedIntelligenceError) as info:
        raise error
    assert info.value is error