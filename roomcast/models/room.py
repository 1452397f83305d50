from roomcast.models.connection import Connection


class Room:
    """A named, tagged set of member connections."""

    def __init__(self, room_id: str, title: str | None = None, tags: list[str] | None = None) -> None:
        self.id = room_id
        self.title = title or room_id
        self.tags: list[str] = _unique(tags or [])
        # connection_id -> Connection; dict keeps join order for peer snapshots
        self.members: dict[str, Connection] = {}

    def __repr__(self) -> str:
        return f"<Room {self.id!r} members={len(self.members)}>"

    def __contains__(self, conn: Connection) -> bool:
        return self.members.get(conn.id) is conn

    def __len__(self) -> int:
        return len(self.members)

    def get_member(self, connection_id: object) -> Connection | None:
        if not isinstance(connection_id, str):
            return None
        return self.members.get(connection_id)

    def has_tag(self, tag: str) -> bool:
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)

    def peer_snapshot(self, exclude: Connection | None = None) -> list[dict]:
        return [
            {"id": member.id, "name": member.display_name}
            for member in self.members.values()
            if member is not exclude
        ]

    def summary(self) -> dict:
        return {
            "roomId": self.id,
            "title": self.title,
            "tags": list(self.tags),
            "participantCount": len(self.members),
        }


def _unique(tags: list[str]) -> list[str]:
    seen: list[str] = []
    for tag in tags:
        if tag not in seen:
            seen.append(tag)
    return seen
