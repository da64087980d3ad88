"""
catalog.py

YouTube Data API v3 implementation of CatalogProvider.

Every call goes through YouTubeApiManager.execute_with_retry, so callers
only ever see djemini.errors variants.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, TypeAlias

from djemini import config
from djemini.errors import TransientError
from djemini.logger import get_logger
from djemini.providers.base import CatalogProvider
from djemini.providers.youtube.api_manager import YouTubeApiManager
from djemini.store.models import RemoteItem, SourceCandidate

logger = get_logger(__name__)

YouTubeClient: TypeAlias = Any


def _snippet_item(video: Dict[str, Any]) -> Optional[RemoteItem]:
    vid = video.get("id")
    snippet = video.get("snippet") or {}
    if not isinstance(vid, str) or not vid or not snippet:
        return None
    return RemoteItem(
        external_id=vid,
        title=snippet.get("title") or "",
        publisher=snippet.get("channelTitle") or None,
    )


class YouTubeCatalog(CatalogProvider):
    name = "youtube"

    def __init__(self, youtube: YouTubeClient, api: Optional[YouTubeApiManager] = None):
        self.youtube = youtube
        self.api = api or YouTubeApiManager()

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def _pages(self, request_factory, name: str) -> Iterator[Dict[str, Any]]:
        """Follow nextPageToken until the listing is exhausted."""
        page_token: Optional[str] = None
        page = 0
        while True:
            page += 1

            def _op() -> Any:
                return request_factory(page_token).execute()

            resp = self.api.execute_with_retry(_op, f"{name} page {page}")
            yield resp

            page_token = resp.get("nextPageToken")
            if not page_token:
                break

    def list_my_playlists(self) -> Iterator[SourceCandidate]:
        for resp in self._pages(
            lambda token: self.youtube.playlists().list(
                part="snippet,contentDetails",
                mine=True,
                maxResults=config.YOUTUBE_PAGE_SIZE,
                pageToken=token,
            ),
            "playlists.list",
        ):
            for it in resp.get("items", []):
                pid = it.get("id")
                if not isinstance(pid, str):
                    continue
                yield SourceCandidate(
                    remote_id=pid,
                    title=(it.get("snippet") or {}).get("title") or pid,
                    item_count=int((it.get("contentDetails") or {}).get("itemCount") or 0),
                )

    def get_playlist_title(self, remote_id: str) -> Optional[str]:
        def _op() -> Any:
            return (
                self.youtube.playlists()
                .list(part="snippet", id=remote_id, maxResults=1)
                .execute()
            )

        resp = self.api.execute_with_retry(_op, f"playlists.list id={remote_id}")
        items = resp.get("items") or []
        if not items:
            return None
        return (items[0].get("snippet") or {}).get("title") or None

    def list_liked_items(self) -> Iterator[RemoteItem]:
        for resp in self._pages(
            lambda token: self.youtube.videos().list(
                part="snippet",
                myRating="like",
                maxResults=config.YOUTUBE_PAGE_SIZE,
                pageToken=token,
            ),
            "videos.list myRating=like",
        ):
            for video in resp.get("items", []):
                item = _snippet_item(video)
                if item is not None:
                    yield item

    def _video_details(self, video_ids: List[str]) -> List[RemoteItem]:
        def _op() -> Any:
            return (
                self.youtube.videos()
                .list(
                    part="snippet",
                    id=",".join(video_ids),
                    maxResults=config.YOUTUBE_PAGE_SIZE,
                )
                .execute()
            )

        resp = self.api.execute_with_retry(_op, "videos.list details")
        out: List[RemoteItem] = []
        for video in resp.get("items", []):
            item = _snippet_item(video)
            if item is not None:
                out.append(item)
        return out

    def list_playlist_items(self, remote_id: str) -> Iterator[RemoteItem]:
        """
        playlistItems.list only carries the playlist owner's channel, so each
        page is followed by a videos.list lookup for the uploading channel.
        Deleted or private videos come back without details and are dropped.
        """
        for resp in self._pages(
            lambda token: self.youtube.playlistItems().list(
                part="snippet,contentDetails",
                playlistId=remote_id,
                maxResults=config.YOUTUBE_PAGE_SIZE,
                pageToken=token,
            ),
            f"playlistItems.list {remote_id}",
        ):
            video_ids: List[str] = []
            for it in resp.get("items", []):
                cd = it.get("contentDetails") or {}
                vid = cd.get("videoId") or (
                    ((it.get("snippet") or {}).get("resourceId") or {}).get("videoId")
                )
                if isinstance(vid, str) and vid:
                    video_ids.append(vid)

            if not video_ids:
                continue

            yield from self._video_details(video_ids)

    def current_account_name(self) -> Optional[str]:
        def _op() -> Any:
            return (
                self.youtube.channels()
                .list(part="snippet", mine=True, maxResults=1)
                .execute()
            )

        resp = self.api.execute_with_retry(_op, "channels.list mine")
        items = resp.get("items") or []
        if not items:
            return None
        return (items[0].get("snippet") or {}).get("title")

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def create_playlist(self, name: str, description: str, privacy: str) -> str:
        def _op() -> Any:
            return (
                self.youtube.playlists()
                .insert(
                    part="snippet,status",
                    body={
                        "snippet": {"title": name, "description": description},
                        "status": {"privacyStatus": privacy},
                    },
                )
                .execute()
            )

        resp = self.api.execute_with_retry(_op, f"create playlist {name!r}", write=True)
        remote_id = resp.get("id")
        if not remote_id:
            raise TransientError(
                f"playlists.insert returned no id for {name!r}", service=self.name
            )
        logger.debug("Created remote playlist %s for %r", remote_id, name)
        return remote_id

    def add_item(self, remote_playlist_id: str, external_item_id: str) -> None:
        def _op() -> Any:
            return (
                self.youtube.playlistItems()
                .insert(
                    part="snippet",
                    body={
                        "snippet": {
                            "playlistId": remote_playlist_id,
                            "resourceId": {
                                "kind": "youtube#video",
                                "videoId": external_item_id,
                            },
                        }
                    },
                )
                .execute()
            )

        self.api.execute_with_retry(_op, f"insert {external_item_id}", write=True)
