from tagify.db.models.playlist import Playlist, Tag, playlist_tags

__all__ = ["Playlist", "Tag", "playlist_tags"]
