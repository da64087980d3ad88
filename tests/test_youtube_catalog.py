import pytest

from djemini.errors import TransientError
from djemini.providers.youtube.api_manager import YouTubeApiManager
from djemini.providers.youtube.catalog import YouTubeCatalog


class Request:
    def __init__(self, response):
        self.response = response

    def execute(self):
        return self.response


class Resource:
    """Records list/insert kwargs and replays canned pages by pageToken."""

    def __init__(self, pages=None, inserted=None):
        self.pages = pages or {}
        self.inserted = inserted or {}
        self.list_calls = []
        self.insert_calls = []

    def list(self, **kwargs):
        self.list_calls.append(kwargs)
        key = kwargs.get("pageToken") or kwargs.get("id")
        return Request(self.pages.get(key, self.pages.get(None, {})))

    def insert(self, **kwargs):
        self.insert_calls.append(kwargs)
        return Request(self.inserted)


class FakeYouTube:
    def __init__(self, **resources):
        self._resources = resources

    def __getattr__(self, name):
        resource = self._resources.get(name)
        if resource is None:
            raise AttributeError(name)
        return lambda: resource


def video(vid, title, channel):
    return {"id": vid, "snippet": {"title": title, "channelTitle": channel}}


def catalog(**resources):
    return YouTubeCatalog(FakeYouTube(**resources), YouTubeApiManager(sleep_sec=0))


def test_liked_items_follow_pages():
    videos = Resource(
        pages={
            None: {"items": [video("v1", "A", "Ch")], "nextPageToken": "p2"},
            "p2": {"items": [video("v2", "B", "Ch"), {"id": "bad"}]},
        }
    )
    items = list(catalog(videos=videos).list_liked_items())

    assert [i.external_id for i in items] == ["v1", "v2"]
    assert videos.list_calls[0]["myRating"] == "like"
    assert videos.list_calls[1]["pageToken"] == "p2"


def test_playlist_items_use_video_channel():
    playlist_items = Resource(
        pages={
            None: {
                "items": [
                    {"contentDetails": {"videoId": "v1"}},
                    {"snippet": {"resourceId": {"videoId": "v2"}}},
                    {"contentDetails": {}},
                ]
            }
        }
    )
    videos = Resource(pages={"v1,v2": {"items": [video("v1", "Song", "Singer - Topic")]}})

    items = list(catalog(playlistItems=playlist_items, videos=videos).list_playlist_items("PL1"))

    # v2 came back without details (deleted/private) and is dropped
    assert [(i.external_id, i.publisher) for i in items] == [("v1", "Singer - Topic")]
    assert playlist_items.list_calls[0]["playlistId"] == "PL1"


def test_my_playlists():
    playlists = Resource(
        pages={
            None: {
                "items": [
                    {"id": "PL1", "snippet": {"title": "Gym"}, "contentDetails": {"itemCount": 12}}
                ]
            }
        }
    )
    found = list(catalog(playlists=playlists).list_my_playlists())
    assert [(c.remote_id, c.title, c.item_count) for c in found] == [("PL1", "Gym", 12)]


def test_playlist_title_lookup():
    playlists = Resource(pages={"PL1": {"items": [{"snippet": {"title": "Gym"}}]}})
    assert catalog(playlists=playlists).get_playlist_title("PL1") == "Gym"
    assert catalog(playlists=Resource()).get_playlist_title("PL9") is None


def test_create_playlist_and_add_item():
    playlists = Resource(inserted={"id": "PLnew"})
    playlist_items = Resource(inserted={"id": "x"})
    cat = catalog(playlists=playlists, playlistItems=playlist_items)

    assert cat.create_playlist("Chill", "desc", "private") == "PLnew"
    body = playlists.insert_calls[0]["body"]
    assert body["snippet"] == {"title": "Chill", "description": "desc"}
    assert body["status"] == {"privacyStatus": "private"}

    cat.add_item("PLnew", "v1")
    snippet = playlist_items.insert_calls[0]["body"]["snippet"]
    assert snippet["playlistId"] == "PLnew"
    assert snippet["resourceId"] == {"kind": "youtube#video", "videoId": "v1"}


def test_create_without_id_is_transient():
    cat = catalog(playlists=Resource(inserted={}))
    with pytest.raises(TransientError):
        cat.create_playlist("Chill", "", "private")
