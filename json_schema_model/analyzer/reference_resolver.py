"""
Reference resolver for $ref resolution.

Binds every $ref in a parsed document to its target node and computes the
"actual" schema of a node by following reference chains. Results are
memoized per node, so repeated lookups are O(1) after the first one.

Only $ref links are followed. Structural containment (a property whose
array items refer back to the enclosing definition) is never walked here,
which is why container cycles are always safe.
"""

from __future__ import annotations

from urllib.parse import unquote

from ..errors import SchemaCycleError, SchemaReferenceError
from ..schema_ast.nodes import JsonObjectType, SchemaNode

# URI under which the root document is registered
ROOT_DOCUMENT = ""


class ReferenceResolver:
    """Resolves $ref to actual schema nodes."""

    def __init__(self, root: SchemaNode):
        """
        Initialize the resolver.

        Args:
            root: Root node of the parsed document
        """
        self.root = root
        self._documents: dict[str, SchemaNode] = {}
        self._pointer_index: dict[str, dict[str, SchemaNode]] = {}
        self._node_document: dict[SchemaNode, str] = {}
        self._actual_schema_cache: dict[SchemaNode, SchemaNode] = {}
        self._actual_type_schema_cache: dict[SchemaNode, SchemaNode] = {}
        self.add_document(ROOT_DOCUMENT, root)

    def add_document(self, uri: str, root: SchemaNode) -> None:
        """
        Register an already-parsed external document.

        Remote fetching is left to the caller: a $ref to any URI that was
        not registered here fails with SchemaReferenceError.

        Args:
            uri: The URI part of references pointing into this document
            root: Root node of the parsed external document
        """
        self._documents[uri] = root
        index: dict[str, SchemaNode] = {}
        for node in self._walk(root):
            index[node.pointer] = node
            self._node_document[node] = uri
        self._pointer_index[uri] = index

    def bind(self) -> None:
        """
        Bind every $ref of every registered document to its target node.

        Raises:
            SchemaReferenceError: If a reference target does not exist
        """
        for uri in list(self._documents):
            for node in self._pointer_index[uri].values():
                if node.has_reference and node.reference is None:
                    node.reference = self._lookup(node)

    def resolve(self, node: SchemaNode) -> SchemaNode:
        """
        Return the terminal node reachable from node by following $ref.

        Args:
            node: Any node of a registered document

        Returns:
            The first node of the chain that carries no $ref

        Raises:
            SchemaReferenceError: If a link of the chain cannot be found
            SchemaCycleError: If the chain loops back on itself
        """
        cached = self._actual_schema_cache.get(node)
        if cached is not None:
            return cached

        chain: list[SchemaNode] = []
        seen: set[SchemaNode] = set()
        current = node
        while current.has_reference:
            if current in seen:
                raise SchemaCycleError(current.pointer, [n.reference_path or n.pointer for n in chain])
            seen.add(current)
            chain.append(current)
            if current.reference is None:
                current.reference = self._lookup(current)
            current = current.reference
            cached = self._actual_schema_cache.get(current)
            if cached is not None:
                current = cached
                break

        for visited in chain:
            self._actual_schema_cache[visited] = current
        self._actual_schema_cache[current] = current
        return current

    actual_schema = resolve

    def actual_type_schema(self, node: SchemaNode) -> SchemaNode:
        """
        Return the actual schema, unwrapping reference-only combinators.

        A single-entry allOf (or a oneOf/anyOf whose only non-null entry is a
        reference) is the usual way to attach a $ref next to keywords such as
        description or nullable. Such wrappers are replaced by their target.
        """
        cached = self._actual_type_schema_cache.get(node)
        if cached is not None:
            return cached

        seen: set[SchemaNode] = set()
        current = self.resolve(node)
        while current not in seen:
            seen.add(current)
            wrapped = self._wrapped_reference(current)
            if wrapped is None:
                break
            current = self.resolve(wrapped)

        self._actual_type_schema_cache[node] = current
        return current

    def get_definition(self, name: str) -> SchemaNode | None:
        """Get a root definition by its original name."""
        return self.root.definitions.get(name)

    def _wrapped_reference(self, node: SchemaNode) -> SchemaNode | None:
        """Return the referenced entry if node is only a wrapper around it."""
        if node.properties or node.is_enumeration or node.item is not None or node.items:
            return None
        if node.is_definition:
            # Named definitions keep their own type even when they only wrap a reference
            return None
        if node.type_flags & ~(JsonObjectType.OBJECT | JsonObjectType.NULL):
            return None

        if len(node.all_of) == 1 and not node.any_of and not node.one_of:
            entry = node.all_of[0]
            return entry if entry.has_reference else None

        for alternatives in (node.one_of, node.any_of):
            if not alternatives or node.all_of:
                continue
            non_null = [a for a in alternatives if a.type_flags != JsonObjectType.NULL or a.has_reference]
            if len(non_null) == 1 and non_null[0].has_reference:
                return non_null[0]
        return None

    def _lookup(self, node: SchemaNode) -> SchemaNode:
        """Find the target node of node.reference_path."""
        reference = node.reference_path or ""
        uri, _, fragment = reference.partition("#")
        if not uri:
            uri = self._node_document.get(node, ROOT_DOCUMENT)

        index = self._pointer_index.get(uri)
        if index is None:
            raise SchemaReferenceError(reference, node.pointer)

        pointer = "#" + unquote(fragment).rstrip("/")
        target = index.get(pointer)
        if target is None and "/$defs/" in pointer:
            target = index.get(pointer.replace("/$defs/", "/definitions/", 1))
        elif target is None and "/definitions/" in pointer:
            target = index.get(pointer.replace("/definitions/", "/$defs/", 1))
        if target is None:
            raise SchemaReferenceError(reference, node.pointer)
        return target

    @staticmethod
    def _walk(root: SchemaNode) -> list[SchemaNode]:
        """All nodes structurally contained in root, in document order."""
        nodes: list[SchemaNode] = []
        stack = [root]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.children()))
        return nodes
