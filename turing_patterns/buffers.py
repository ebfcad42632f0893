"""
Grid Buffer Pair

Two equal-size fields of two float32 channels (A, B), laid out
channel-first as (2, size, size). One buffer is the READ buffer (the
committed state), the other the WRITE buffer (the step target). Roles
only change through commit(), so a step can never read and write the
same field.
"""

import enum
import numpy as np

from .errors import AllocationError, ConfigurationError

CHANNELS = 2  # A (substrate), B (catalyst)


class BufferRole(enum.Enum):
    READ = "read"
    WRITE = "write"


class BufferPair:
    """Double buffer owned by one simulation session.

    Args:
        size: Grid resolution (size x size cells)
        backend: Array backend used to allocate both fields
    """

    def __init__(self, size, backend):
        if not isinstance(size, (int, np.integer)) or isinstance(size, bool) or size <= 0:
            raise ConfigurationError(f"size must be a positive integer, got {size!r}")
        self.size = int(size)
        self.backend = backend
        shape = (CHANNELS, self.size, self.size)
        try:
            self._buffers = (backend.zeros(shape), backend.zeros(shape))
        except (MemoryError, RuntimeError) as e:
            raise AllocationError(
                f"could not allocate two {shape} float32 buffers "
                f"on the {backend.name} backend") from e
        self._roles = [BufferRole.READ, BufferRole.WRITE]
        self.commits = 0

    def _index(self, role):
        return self._roles.index(role)

    def read(self):
        """Committed state; read-only for the current step."""
        return self._buffers[self._index(BufferRole.READ)]

    def write(self):
        """Field the next step populates."""
        return self._buffers[self._index(BufferRole.WRITE)]

    def commit(self):
        """Exchange READ and WRITE roles."""
        self._roles.reverse()
        self.commits += 1

    def role_of(self, index):
        return self._roles[index]

    def snapshot(self):
        """Host (numpy) copy of the READ buffer."""
        return self.backend.to_numpy(self.read())

    def buffers(self):
        """Host copies of both buffers, in allocation order."""
        return tuple(self.backend.to_numpy(b) for b in self._buffers)
