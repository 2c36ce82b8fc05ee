"""Unit tests for name, path and id validation."""
import pytest

from virtual_drive.errors import ErrorCode, InvalidItemIdError, InvalidNameError, InvalidPathError
from virtual_drive.validation import (
    MAX_ID_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PATH_LENGTH,
    ensure_valid_item_id,
    ensure_valid_name,
    ensure_valid_path,
    validate_item_id,
    validate_name,
    validate_path,
)


class TestValidateName:

    @pytest.mark.parametrize('name', [
        'report.txt',
        'My Folder',
        'Docs (Copy 1)',
        'a' * MAX_NAME_LENGTH,
        '.hidden',
    ])
    def test_accepts(self, name):
        result = validate_name(name)
        assert result.valid
        assert result
        assert result.message is None

    @pytest.mark.parametrize('name,message', [
        ('', 'Name cannot be empty'),
        ('   ', 'Name cannot be empty'),
        (' lead', 'Name cannot start or end with spaces'),
        ('trail ', 'Name cannot start or end with spaces'),
        ('.', "Name cannot be '.' or '..'"),
        ('..', "Name cannot be '.' or '..'"),
        ('a' * (MAX_NAME_LENGTH + 1), f'Name is too long (max {MAX_NAME_LENGTH} characters)'),
        ('a/b', 'Name contains invalid characters'),
        ('what?', 'Name contains invalid characters'),
        ('tab\there', 'Name contains invalid characters'),
        ('CON', 'Name is reserved by the system'),
        ('lpt1.txt', 'Name is reserved by the system'),
    ])
    def test_rejects(self, name, message):
        result = validate_name(name)
        assert not result.valid
        assert result.message == message
        assert result.code == ErrorCode.INVALID_NAME

    def test_non_string_is_empty(self):
        assert not validate_name(None).valid

    def test_ensure_valid_name_raises(self):
        with pytest.raises(InvalidNameError) as exc_info:
            ensure_valid_name('')
        assert exc_info.value.code == ErrorCode.INVALID_NAME

    def test_ensure_valid_name_returns_name(self):
        assert ensure_valid_name('ok') == 'ok'


class TestValidatePath:

    def test_accepts_nested(self):
        assert validate_path('Program Files/Adobe').valid

    @pytest.mark.parametrize('path,message', [
        ('', 'Path cannot be empty'),
        ('a/../b', "Path cannot contain '..'"),
        ('a' * (MAX_PATH_LENGTH + 1), f'Path is too long (max {MAX_PATH_LENGTH} characters)'),
        ('a\x00b', 'Path contains invalid characters'),
    ])
    def test_rejects(self, path, message):
        result = validate_path(path)
        assert not result.valid
        assert result.message == message
        assert result.code == ErrorCode.INVALID_PATH

    def test_ensure_valid_path_allows_root(self):
        assert ensure_valid_path('') == ''

    def test_ensure_valid_path_raises(self):
        with pytest.raises(InvalidPathError) as exc_info:
            ensure_valid_path('a/../b')
        assert exc_info.value.path == 'a/../b'


class TestValidateItemId:

    def test_accepts_uuid(self):
        assert validate_item_id('3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b').valid

    def test_rejects_empty(self):
        result = validate_item_id('')
        assert not result.valid
        assert result.code == ErrorCode.INVALID_ITEM_ID

    def test_rejects_non_uuid(self):
        assert validate_item_id('not-a-uuid').message == 'ID is not a valid UUID'

    def test_short_token_allowed_without_uuid_rule(self):
        assert validate_item_id('5', require_uuid=False).valid

    def test_rejects_too_long(self):
        result = validate_item_id('a' * (MAX_ID_LENGTH + 1), require_uuid=False)
        assert result.message == f'ID is too long (max {MAX_ID_LENGTH} characters)'

    def test_rejects_control_characters(self):
        result = validate_item_id('a\nb', require_uuid=False)
        assert result.message == 'ID contains invalid characters'

    def test_ensure_valid_item_id_returns_id(self):
        assert ensure_valid_item_id('ad1') == 'ad1'

    def test_ensure_valid_item_id_raises(self):
        with pytest.raises(InvalidItemIdError) as exc_info:
            ensure_valid_item_id('x' * (MAX_ID_LENGTH + 1))
        assert exc_info.value.code == ErrorCode.INVALID_ITEM_ID
        assert not exc_info.value.retryable

    def test_ensure_valid_item_id_can_require_uuid(self):
        with pytest.raises(InvalidItemIdError):
            ensure_valid_item_id('ad1', require_uuid=True)
