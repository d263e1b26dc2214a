"""Construction des fils de commentaires (un seul niveau de réponses)."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from hub.domain.entities import Comment


@dataclass
class CommentThread:
    comment: Comment
    replies: list[Comment] = field(default_factory=list)


def build_threads(comments: list[Comment]) -> list[CommentThread]:
    """Regroupe les commentaires en fils.

    Deux passes: les commentaires racines d'abord, puis les réponses rattachées à
    leur parent. L'ordre d'entrée (chronologique) est conservé. Les réponses dont
    le parent est absent sont ignorées.
    """
    children: dict[str, list[Comment]] = defaultdict(list)
    for c in comments:
        if c.parent_id:
            children[c.parent_id].append(c)
    return [
        CommentThread(comment=c, replies=children.get(c.id, []))
        for c in comments
        if not c.parent_id
    ]
