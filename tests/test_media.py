from __future__ import annotations

import io

import pytest
from PIL import Image

from bizcard.domain.media import is_video_url, media_type_for, upload_extension, video_embed, vimeo_id, youtube_id
from bizcard.repositories.sql_repository import SQLRepository
from bizcard.services.card_service import CardNotFoundError, CardService
from bizcard.services.media_service import MediaService, UnsupportedMediaError, UploadTooLargeError


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
        "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "youtu.be/dQw4w9WgXcQ?si=abc",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
    ],
)
def test_youtube_id_variants(url):
    assert youtube_id(url) == "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/",
        "https://youtube.com/watch?v=short",
        "https://example.com/watch?v=dQw4w9WgXcQ",
        "https://notyoutube.com/watch?v=dQw4w9WgXcQ",
        "http://[x",
        "",
    ],
)
def test_youtube_id_rejects_non_video_urls(url):
    assert youtube_id(url) is None


def test_vimeo_id():
    assert vimeo_id("https://vimeo.com/76979871") == "76979871"
    assert vimeo_id("https://player.vimeo.com/video/76979871") == "76979871"
    assert vimeo_id("https://vimeo.com/channels/staffpicks/76979871") == "76979871"
    assert vimeo_id("https://vimeo.com/about") is None
    assert vimeo_id("https://youtube.com/76979871") is None
    assert vimeo_id("https://notvimeo.com/76979871") is None
    assert vimeo_id("http://[x") is None


def test_video_embed_builds_embed_and_thumbnail_urls():
    yt = video_embed("https://youtu.be/dQw4w9WgXcQ")
    assert yt.provider == "youtube"
    assert yt.embed_url == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert yt.thumbnail_url == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"

    vm = video_embed("https://vimeo.com/76979871")
    assert vm.provider == "vimeo"
    assert vm.embed_url == "https://player.vimeo.com/video/76979871"

    assert video_embed("https://www.twitch.tv/somechannel") is None


def test_is_video_url():
    assert is_video_url("https://www.dailymotion.com/video/x7tgad0")
    assert is_video_url("twitch.tv/somechannel")
    assert not is_video_url("https://notyoutube.com/watch?v=dQw4w9WgXcQ")
    assert not is_video_url("")


def test_media_type_for():
    assert media_type_for("image/png") == "image"
    assert media_type_for("video/mp4") == "video"
    assert media_type_for("application/pdf") == "document"
    assert media_type_for(None) == "document"


def _png_bytes(size=(2400, 1200)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, "#3B82F6").save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def owner(temp_db):
    repo = SQLRepository()
    user = repo.create_user("media@example.com", password_hash="hash")
    repo.create_card(user.id, {"title": "Media Owner"})
    return user.id


def test_image_upload_is_resized_and_stored(owner, tmp_path):
    svc = MediaService()
    item = svc.upload(owner, "photo.png", "image/png", _png_bytes())
    assert item.type == "image"
    assert item.mime_type == "image/jpeg"
    assert item.title == "photo"
    assert item.url.startswith("/static/uploads/")
    rel_path = item.url.split("/static/uploads/", 1)[1].split("?", 1)[0]
    stored = tmp_path / "uploads" / rel_path
    assert stored.exists()
    with Image.open(stored) as img:
        assert max(img.size) <= 1600


def test_document_upload_keeps_bytes(owner):
    svc = MediaService()
    item = svc.upload(owner, "cv.pdf", "application/pdf", b"%PDF-1.4 fake")
    assert item.type == "document"
    assert item.url.split("?", 1)[0].endswith(".pdf")
    assert item.file_size == len(b"%PDF-1.4 fake")


def test_invalid_image_is_rejected(owner):
    with pytest.raises(UnsupportedMediaError):
        MediaService().upload(owner, "broken.png", "image/png", b"not an image")


def test_upload_size_limit(owner, monkeypatch):
    from bizcard.core import config as core_config

    monkeypatch.setenv("MAX_UPLOAD_BYTES", "10")
    core_config.get_settings.cache_clear()
    with pytest.raises(UploadTooLargeError):
        MediaService().upload(owner, "cv.pdf", "application/pdf", b"x" * 11)


def test_video_link_flow(owner):
    svc = MediaService()
    item = svc.add_video_link(owner, "https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    assert item.title == "Video Link"
    assert item.thumbnail_url == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"
    with pytest.raises(UnsupportedMediaError):
        svc.add_video_link(owner, "https://example.com/video.mp4")

    svc.rename(owner, item.id, "Intro")
    assert [i.title for i in svc.list_items(owner)] == ["Intro"]
    svc.remove(owner, item.id)
    assert svc.list_items(owner) == []


def test_media_of_other_users_is_not_reachable(owner):
    repo = SQLRepository()
    intruder = repo.create_user("intruder@example.com", password_hash="hash")
    repo.create_card(intruder.id, {"title": "Intruder"})
    item = MediaService().add_video_link(owner, "https://vimeo.com/76979871")
    with pytest.raises(CardNotFoundError):
        MediaService().remove(intruder.id, item.id)


def test_upload_extension_whitelist():
    assert upload_extension("image/png", "photo.PNG") == ".jpg"
    assert upload_extension("application/pdf", "cv.PDF") == ".pdf"
    assert upload_extension("video/mp4", "clip.mp4") == ".mp4"
    assert upload_extension("text/html", "evil.html") is None
    assert upload_extension("image/svg+xml", "logo.svg") is None
    assert upload_extension("application/javascript", "x.js") is None
    assert upload_extension("application/pdf", "evil.html") is None
    assert upload_extension(None, "cv.pdf") is None


@pytest.mark.parametrize(
    "filename, mime_type",
    [("evil.html", "text/html"), ("x.js", "application/javascript"), ("logo.svg", "image/svg+xml"), ("cv.html", "application/pdf")],
)
def test_scriptable_uploads_are_rejected(owner, tmp_path, filename, mime_type):
    with pytest.raises(UnsupportedMediaError):
        MediaService().upload(owner, filename, mime_type, b"<script>alert(1)</script>")
    assert MediaService().list_items(owner) == []
    assert not (tmp_path / "uploads").exists()


def _stored_path(tmp_path, item):
    return tmp_path / "uploads" / item.url.split("/static/uploads/", 1)[1].split("?", 1)[0]


def test_removing_upload_deletes_the_file(owner, tmp_path):
    svc = MediaService()
    item = svc.upload(owner, "a.pdf", "application/pdf", b"%PDF-1.4 fake")
    stored = _stored_path(tmp_path, item)
    assert stored.exists()
    svc.remove(owner, item.id)
    assert not stored.exists()
    assert svc.list_items(owner) == []


def test_deleting_card_removes_its_uploads(owner, tmp_path):
    item = MediaService().upload(owner, "a.pdf", "application/pdf", b"%PDF-1.4 fake")
    card_dir = _stored_path(tmp_path, item).parent
    assert card_dir.is_dir()
    CardService().delete_card(owner)
    assert not card_dir.exists()


def test_batch_upload_stores_nothing_when_one_file_fails(owner, tmp_path):
    svc = MediaService()
    with pytest.raises(UnsupportedMediaError):
        svc.upload_many(
            owner,
            [("cv.pdf", "application/pdf", b"%PDF-1.4 fake"), ("broken.png", "image/png", b"not an image")],
        )
    assert svc.list_items(owner) == []
    assert not (tmp_path / "uploads").exists()

    items = svc.upload_many(
        owner,
        [("cv.pdf", "application/pdf", b"%PDF-1.4 fake"), ("photo.png", "image/png", _png_bytes((40, 20)))],
    )
    assert [i.type for i in items] == ["document", "image"]
    assert len({i.url for i in items}) == 2
