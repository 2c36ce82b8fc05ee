"""Unit tests for InMemoryFileStorage."""
import pytest

from virtual_drive.errors import DuplicateNameError, StorageContractError
from virtual_drive.inmemory import SAMPLE_DATA, InMemoryFileStorage
from virtual_drive.models import FileItem
from virtual_drive.protocols import BulkFileStorage, FileStorage


def _item(item_id, name, path=None, item_type='file'):
    return FileItem(id=item_id, name=name, type=item_type, path=path or name, modified='2024-01-01')


def test_satisfies_storage_protocol():
    storage = InMemoryFileStorage()
    assert isinstance(storage, FileStorage)
    assert not isinstance(storage, BulkFileStorage)


@pytest.mark.asyncio
async def test_unknown_path_lists_empty(storage):
    assert await storage.list_children('nowhere') == []


@pytest.mark.asyncio
async def test_replace_then_list_round_trip(storage):
    await storage.replace_children('', [_item('1', 'a'), _item('2', 'b')])
    names = [item.name for item in await storage.list_children('')]
    assert names == ['a', 'b']


@pytest.mark.asyncio
async def test_returned_listing_is_a_copy(storage):
    await storage.replace_children('', [_item('1', 'a')])
    listing = await storage.list_children('')
    listing[0].name = 'mutated'
    listing.append(_item('2', 'b'))

    fresh = await storage.list_children('')
    assert [item.name for item in fresh] == ['a']


@pytest.mark.asyncio
async def test_stored_listing_is_a_copy(storage):
    items = [_item('1', 'a')]
    await storage.replace_children('', items)
    items[0].name = 'mutated'
    assert (await storage.list_children(''))[0].name == 'a'


@pytest.mark.asyncio
async def test_replace_rejects_duplicate_names(storage):
    with pytest.raises(DuplicateNameError) as exc_info:
        await storage.replace_children('Docs', [_item('1', 'x'), _item('2', 'x')])
    assert str(exc_info.value) == 'Duplicate file/folder name "x" in path "Docs"'
    assert await storage.list_children('Docs') == []


@pytest.mark.asyncio
async def test_replace_rejects_non_list(storage):
    with pytest.raises(StorageContractError):
        await storage.replace_children('', {'not': 'a list'})


@pytest.mark.asyncio
async def test_remove_item(storage):
    await storage.replace_children('', [_item('1', 'a'), _item('2', 'b')])
    assert await storage.remove_item('', '1') is True
    assert [item.id for item in await storage.list_children('')] == ['2']


@pytest.mark.asyncio
async def test_remove_missing_item_returns_false(storage):
    assert await storage.remove_item('', 'missing') is False
    await storage.replace_children('', [_item('1', 'a')])
    assert await storage.remove_item('', 'missing') is False


@pytest.mark.asyncio
async def test_sample_data_is_seeded(sample_storage):
    root = await sample_storage.list_children('')
    assert [item.name for item in root][:2] == ['Common Files', 'Internet Explorer']
    assert len(await sample_storage.list_children('Microsoft Office')) == 3


@pytest.mark.asyncio
async def test_sample_data_is_not_shared_between_instances():
    first = InMemoryFileStorage(use_sample_data=True)
    second = InMemoryFileStorage(use_sample_data=True)
    await first.replace_children('', [])
    assert len(await second.list_children('')) == len(SAMPLE_DATA[''])


def test_every_sample_folder_has_a_listing():
    for items in SAMPLE_DATA.values():
        for item in items:
            if item.is_folder:
                assert item.path in SAMPLE_DATA


def test_initial_data_is_copied():
    data = {'': [_item('1', 'a')]}
    storage = InMemoryFileStorage(data)
    data[''][0].name = 'mutated'
    assert storage.find_by_id('1').name == 'a'


def test_helpers(sample_storage):
    stats = sample_storage.stats()
    assert stats['total_paths'] == len(SAMPLE_DATA)
    assert stats['total_items'] == sum(len(v) for v in SAMPLE_DATA.values())
    assert '' in stats['paths']

    assert sample_storage.find_by_id('mo3').name == 'setup.exe'
    assert sample_storage.find_by_id('nope') is None

    sample_storage.clear()
    assert sample_storage.total_items() == 0
    assert sample_storage.all_paths() == []

    sample_storage.reset_to_sample_data()
    assert sample_storage.total_items() == stats['total_items']
