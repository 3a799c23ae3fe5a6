from collections.abc import Callable

# (current, total)
ProgressCallback = Callable[[int, int], None]
