"""
Sorted path index.

Keeps every stored path in lexical order so that "all paths under P" is a
bisect plus a contiguous scan instead of a pass over the whole snapshot.
"""

import bisect
from typing import Iterator, List

from chanstore.utils.validation import PATH_SEPARATOR


class PathIndex:
    def __init__(self):
        self._paths: List[str] = []

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: str) -> bool:
        i = bisect.bisect_left(self._paths, path)
        return i < len(self._paths) and self._paths[i] == path

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def add(self, path: str):
        if path not in self:
            bisect.insort(self._paths, path)

    def discard(self, path: str):
        i = bisect.bisect_left(self._paths, path)
        if i < len(self._paths) and self._paths[i] == path:
            del self._paths[i]

    def clear(self):
        self._paths.clear()

    def with_prefix(self, prefix: str) -> Iterator[str]:
        """Yield every path starting with prefix, in order."""
        i = bisect.bisect_left(self._paths, prefix)
        while i < len(self._paths) and self._paths[i].startswith(prefix):
            yield self._paths[i]
            i += 1

    def children(self, parent: str) -> Iterator[str]:
        """Yield every path strictly below parent."""
        return self.with_prefix(parent + PATH_SEPARATOR)
