from weftmatch.weight import FnStep, Weight


class Path(Weight):
    """Records the labels of the steps taken and every merged alternative."""

    def __init__(self, labels=()):
        self.labels = tuple(labels)
        self.merged = []

    @classmethod
    def success(cls):
        return cls()

    def concat(self, other):
        return Path(self.labels + other.labels)

    def merge(self, other):
        self.merged.append(other)

    def copy(self):
        new = Path(self.labels)
        new.merged = list(self.merged)
        return new

    def __repr__(self):
        return f"Path({self.labels!r}, merged={self.merged!r})"


def labelled(symbol, label):
    return FnStep(lambda s: Path((label,)) if s == symbol else None)
