"""Trie-based path matching for the ASGI adapter.

Built once from a sealed registry's routes. Static segments win over
``:name`` placeholders at the same depth, unless the static branch has
no route for the request method.
"""

from dataclasses import dataclass

from switchblade.errors import MethodNotAllowed, NotFound
from switchblade.routing.path import join_paths
from switchblade.routing.route import Route


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A matched route plus the decoded path parameters."""

    route: Route
    path_params: dict[str, str]


class _TrieNode:
    """A node in the route trie. Mutable while the router is built."""

    __slots__ = ("children", "param_child", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Single parameter child (only one placeholder per level)
        self.param_child: _ParamEdge | None = None
        # Routes at this node, keyed by HTTP method
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    node: _TrieNode


def _split(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


class Router:
    """Maps ``(method, path)`` to a registered route.

    Usage::

        router = Router(app.routes)
        match = router.match("GET", "/users/42")
        await match.route.run(request, match.path_params)

    Placeholders at the same depth share one trie edge, but parameter
    names come from the matched route's own path, so ``/users/:id`` and
    ``/users/:uid/posts`` can coexist.
    """

    __slots__ = ("_names", "_prefix", "_root")

    def __init__(self, routes: "tuple[Route, ...] | list[Route]" = (), *, prefix: str = "") -> None:
        self._root = _TrieNode()
        # Mount point for every route (``AppConfig.base_path``)
        self._prefix = prefix
        # Per-route placeholder names, by segment index
        self._names: dict[int, dict[int, str]] = {}
        for route in routes:
            self.add(route)

    def add(self, route: Route) -> None:
        node = self._root
        names: dict[int, str] = {}
        for index, segment in enumerate(_split(join_paths(self._prefix, route.path))):
            if segment.startswith(":") and len(segment) > 1:
                names[index] = segment[1:]
                if node.param_child is None:
                    node.param_child = _ParamEdge(node=_TrieNode())
                node = node.param_child.node
            else:
                node = node.children.setdefault(segment, _TrieNode())
        node.routes_by_method[route.method] = route
        self._names[id(route)] = names

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method.

        Raises ``NotFound`` if no route matches the path and
        ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        method = method.upper()
        parts = _split(path)
        # Methods of every node the path reaches, for the Allow header
        allowed: set[str] = set()
        node = self._match_node(self._root, parts, 0, method, allowed)
        if node is None:
            if allowed:
                raise MethodNotAllowed(frozenset(allowed))
            raise NotFound(f"No route matches {method} {path!r}")

        route = node.routes_by_method[method]

        names = self._names[id(route)]
        params = {name: parts[index] for index, name in names.items()}
        return RouteMatch(route=route, path_params=params)

    def _match_node(
        self, node: _TrieNode, parts: list[str], index: int, method: str, allowed: set[str]
    ) -> _TrieNode | None:
        if index == len(parts):
            if method in node.routes_by_method:
                return node
            allowed.update(node.routes_by_method)
            return None

        part = parts[index]
        child = node.children.get(part)
        if child is not None:
            result = self._match_node(child, parts, index + 1, method, allowed)
            if result is not None:
                return result

        if node.param_child is not None:
            return self._match_node(node.param_child.node, parts, index + 1, method, allowed)
        return None
