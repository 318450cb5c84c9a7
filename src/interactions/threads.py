"""Assemble a flat set of comments into a reply tree.

Storage keeps comments flat (adjacency list on ``reply_to_id``). The tree is
rebuilt in a single pass: index by id and by reply target once, then attach
children in ``(created_at, comment_id)`` order at every level.

Rules:
- Logical nesting is unbounded; assembly is iterative, so deep chains never
  hit the interpreter's recursion limit.
- A reply whose target is missing (deleted parent) is promoted to root level
  and flagged ``is_orphan``. Nothing is fabricated in the missing parent's
  place.
- Every input comment appears exactly once in the output. Comments that are
  unreachable from any root (reply cycles in corrupted data) are promoted the
  same way as orphans.
- Display depth is a presentation concern (``display_indent``); the tree
  itself is never truncated.
"""

from collections import defaultdict
from collections.abc import Iterable, Iterator

from .models import Comment, ThreadNode


def _assemble(
    root: Comment,
    children: dict[str, list[Comment]],
    visited: set[str],
    orphan_ids: set[str],
) -> ThreadNode:
    built: dict[str, ThreadNode] = {}
    stack: list[tuple[Comment, bool]] = [(root, False)]

    while stack:
        comment, expanded = stack.pop()
        cid = comment.comment_id

        if expanded:
            replies = tuple(
                built.pop(child.comment_id)
                for child in children.get(cid, ())
                if child.comment_id in built
            )
            built[cid] = ThreadNode(
                comment=comment, replies=replies, is_orphan=cid in orphan_ids
            )
            continue

        if cid in visited:
            continue
        visited.add(cid)
        stack.append((comment, True))
        for child in reversed(children.get(cid, ())):
            if child.comment_id not in visited:
                stack.append((child, False))

    return built[root.comment_id]


def build_thread(comments: Iterable[Comment]) -> list[ThreadNode]:
    """Build the display tree for one content item's comments.

    Args:
        comments: Every comment of a single ``parent_id``, in any order.

    Returns:
        Root-level nodes (roots and promoted orphans) in chronological order.
    """
    by_id: dict[str, Comment] = {}
    for comment in comments:
        by_id.setdefault(comment.comment_id, comment)

    children: defaultdict[str, list[Comment]] = defaultdict(list)
    roots: list[Comment] = []
    orphan_ids: set[str] = set()

    for comment in by_id.values():
        if comment.reply_to_id is None:
            roots.append(comment)
        elif comment.reply_to_id not in by_id:
            roots.append(comment)
            orphan_ids.add(comment.comment_id)
        else:
            children[comment.reply_to_id].append(comment)

    for replies in children.values():
        replies.sort(key=lambda c: c.sort_key)
    roots.sort(key=lambda c: c.sort_key)

    visited: set[str] = set()
    nodes = [_assemble(root, children, visited, orphan_ids) for root in roots]

    # Cycles: promote the earliest unvisited comment until all are placed
    unreached = sorted(
        (c for c in by_id.values() if c.comment_id not in visited),
        key=lambda c: c.sort_key,
    )
    for comment in unreached:
        if comment.comment_id in visited:
            continue
        orphan_ids.add(comment.comment_id)
        nodes.append(_assemble(comment, children, visited, orphan_ids))

    nodes.sort(key=lambda n: n.comment.sort_key)
    return nodes


def flatten_thread(nodes: Iterable[ThreadNode]) -> Iterator[tuple[ThreadNode, int]]:
    """Yield ``(node, depth)`` pairs in display (pre-)order; roots are depth 0."""
    stack = [(node, 0) for node in reversed(list(nodes))]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((reply, depth + 1) for reply in reversed(node.replies))



def display_indent(depth: int, max_display_depth: int) -> int:
    """Indentation level to render for a node at logical ``depth``.

    Nodes deeper than ``max_display_depth`` stay in the tree but are drawn at
    the clamped level instead of indenting further.
    """
    return min(depth, max_display_depth)
