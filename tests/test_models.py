from webtoepub.models import BookMetadata, Chapter, ChapterStatus, MetadataOverride


def _chapter(**kwargs) -> Chapter:
    return Chapter(index=0, title='Chapter 1', url='https://e.com/c1', base_url='https://e.com/', **kwargs)


def test_chapter_lifecycle():
    chapter = _chapter()
    assert chapter.status == ChapterStatus.PENDING
    assert not chapter.is_packageable

    chapter.mark_loading()
    chapter.mark_error('boom')
    assert chapter.status == ChapterStatus.ERROR
    assert chapter.attempts == 1

    chapter.mark_loading()
    chapter.mark_completed('<p>text</p>')
    assert chapter.status == ChapterStatus.COMPLETED
    assert chapter.error is None
    assert chapter.attempts == 2
    assert chapter.is_packageable


def test_deselected_chapter_is_not_packageable():
    chapter = _chapter(selected=False)
    chapter.mark_completed('<p>text</p>')

    assert not chapter.is_packageable


def test_override_only_replaces_non_empty_fields():
    metadata = BookMetadata(title='Found', author='Writer', language='en')
    override = MetadataOverride(title='  Mine ', author='   ', subject='Drama')

    result = override.apply(metadata)

    assert result.title == 'Mine'
    assert result.author == 'Writer'
    assert result.subject == 'Drama'
    assert metadata.title == 'Found'


def test_override_is_empty():
    assert MetadataOverride().is_empty()
    assert MetadataOverride(title='  ').is_empty()
    assert not MetadataOverride(filename='book').is_empty()
