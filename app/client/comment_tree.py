# app/client/comment_tree.py
from typing import Dict, List


def build_comment_tree(comments: List[dict]) -> List[dict]:
    """
    Nest a flat page of comments under their parents.

    Each comment is shallow-copied with a `children` list; input order is kept
    for roots and for siblings. A reply whose parent is not on this page is
    returned as a root.
    """
    by_id: Dict[str, dict] = {}
    for comment in comments:
        by_id[comment["id"]] = {**comment, "children": []}

    roots = []
    for comment in comments:
        node = by_id[comment["id"]]
        parent_id = comment.get("parent_comment_id")
        if parent_id and parent_id in by_id and parent_id != comment["id"]:
            by_id[parent_id]["children"].append(node)
        else:
            roots.append(node)

    return roots
