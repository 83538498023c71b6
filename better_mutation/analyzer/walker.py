"""Single-pass traversal that dispatches nodes to rule handlers by kind."""
from typing import Callable, Dict, List

from .nodes import Node

Handler = Callable[[Node], None]


def walk(root: Node, handlers: Dict[str, List[Handler]]) -> None:
    """Visit every node below ``root`` in document order.

    Args:
        root: Tree to traverse (usually a Program)
        handlers: Node type -> callbacks invoked when a node of that type is entered
    """
    stack = [root]

    while stack:
        node = stack.pop()

        for handler in handlers.get(node.type, ()):
            handler(node)

        # Reverse so the left-most child is visited first
        stack.extend(reversed(list(node.child_nodes())))
