"""Tests for library module."""

import json
import os
from urllib.parse import urlparse
from urllib.request import url2pathname

import pytest

from podcast_producer.library import (
    PodcastNotFound,
    create_podcast,
    delete_podcast,
    get_podcast_status,
    list_podcasts,
    load_podcast,
    slug_from_title,
    update_podcast,
    write_media,
)
from podcast_producer.models import Podcast


def _podcast(title="The Future of AI!", created_at=None):
    podcast = Podcast(title=title, topic="AI", duration="5 minutes", script="Host: Hi.")
    if created_at:
        podcast.created_at = created_at
    return podcast


# --- Slugs ---

def test_slug_from_title():
    """Punctuation and spaces collapse to underscores."""
    assert slug_from_title("The Future of AI!") == "the_future_of_ai"
    assert slug_from_title("  Deep-Sea   Life ") == "deep_sea_life"


def test_slug_from_title_empty():
    """Titles with no usable characters still get a slug."""
    assert slug_from_title("???") == "podcast"


def test_create_podcast_unique_slugs(tmp_path):
    """Same title twice gets a numbered suffix."""
    first = create_podcast(_podcast(), output_base=str(tmp_path))
    second = create_podcast(_podcast(), output_base=str(tmp_path))
    third = create_podcast(_podcast(), output_base=str(tmp_path))
    assert first.slug == "the_future_of_ai"
    assert second.slug == "the_future_of_ai_2"
    assert third.slug == "the_future_of_ai_3"


# --- Records ---

def test_create_then_load(tmp_path):
    """Stored record reads back with the same fields."""
    created = create_podcast(_podcast(), output_base=str(tmp_path))
    loaded = load_podcast(created.slug, output_base=str(tmp_path))
    assert loaded.title == "The Future of AI!"
    assert loaded.script == "Host: Hi."
    assert loaded.thumbnail_url is None
    assert loaded.created_at == created.created_at


def test_record_is_json(tmp_path):
    """podcast.json is plain JSON with the record fields."""
    created = create_podcast(_podcast(), output_base=str(tmp_path))
    with open(tmp_path / created.slug / "podcast.json") as f:
        data = json.load(f)
    assert data["topic"] == "AI"
    assert data["status"] == "completed"
    assert "audio_url" in data


def test_load_missing(tmp_path):
    """Unknown slugs raise PodcastNotFound."""
    with pytest.raises(PodcastNotFound):
        load_podcast("nope", output_base=str(tmp_path))


def test_update_podcast(tmp_path):
    """Field changes persist."""
    created = create_podcast(_podcast(), output_base=str(tmp_path))
    update_podcast(created.slug, output_base=str(tmp_path), audio_url="file:///tmp/a.mp3")
    assert load_podcast(created.slug, output_base=str(tmp_path)).audio_url == "file:///tmp/a.mp3"


def test_update_podcast_unknown_field(tmp_path):
    """Unknown fields are refused rather than silently stored."""
    created = create_podcast(_podcast(), output_base=str(tmp_path))
    with pytest.raises(AttributeError):
        update_podcast(created.slug, output_base=str(tmp_path), colour="red")


def test_delete_podcast(tmp_path):
    """Delete removes the whole project directory."""
    created = create_podcast(_podcast(), output_base=str(tmp_path))
    write_media(created.slug, "audio.mp3", b"mp3", output_base=str(tmp_path))
    delete_podcast(created.slug, output_base=str(tmp_path))
    assert not (tmp_path / created.slug).exists()
    with pytest.raises(PodcastNotFound):
        delete_podcast(created.slug, output_base=str(tmp_path))


def test_list_podcasts_newest_first(tmp_path):
    """Listing is sorted by creation time, newest first."""
    create_podcast(_podcast("Old", "2024-01-01T00:00:00+00:00"), output_base=str(tmp_path))
    create_podcast(_podcast("New", "2025-01-01T00:00:00+00:00"), output_base=str(tmp_path))
    (tmp_path / "stray_dir").mkdir()
    titles = [p.title for p in list_podcasts(output_base=str(tmp_path))]
    assert titles == ["New", "Old"]


def test_list_podcasts_missing_base(tmp_path):
    """A missing output directory lists nothing."""
    assert list_podcasts(output_base=str(tmp_path / "missing")) == []


# --- Media ---

def test_write_media_returns_file_uri(tmp_path):
    """Media lands beside the record and is addressed by file:// URI."""
    created = create_podcast(_podcast(), output_base=str(tmp_path))
    uri = write_media(created.slug, "video.webm", b"webm", output_base=str(tmp_path))
    assert uri.startswith("file://")
    path = url2pathname(urlparse(uri).path)
    assert os.path.samefile(path, tmp_path / created.slug / "video.webm")


def test_get_podcast_status():
    """Each stage is done once its output exists."""
    podcast = _podcast()
    podcast.audio_url = "file:///tmp/a.mp3"
    status = get_podcast_status(podcast)
    assert status["script"]["state"] == "done"
    assert status["thumbnail"]["state"] == "pending"
    assert status["audio"]["state"] == "done"
    assert status["video"]["state"] == "pending"
