class UniqueNamer(object):
    """
    A UniqueNamer issues blank node labels ('<prefix><counter>'), mapping
    each original label to the same new label on every later request.

    A namer belongs to the single top-level operation that created it and
    is handed down through the recursive calls of that operation.
    """

    def __init__(self, prefix):
        """
        Initializes a new UniqueNamer.

        :param prefix: the prefix to use ('<prefix><counter>').
        """
        self.prefix = prefix
        self.counter = 0
        self.existing = {}
        self.order = []

    def get_name(self, old=None):
        """
        Gets the new name for the given old name, where if no old name is
        given a fresh name is generated.

        :param [old]: the old name to get the new name for.

        :return: the new name.
        """
        if old is not None and old in self.existing:
            return self.existing[old]

        name = self.prefix + str(self.counter)
        self.counter += 1

        if old is not None:
            self.existing[old] = name
            self.order.append(old)

        return name

    def is_named(self, old):
        """
        Returns True if the given old name has already been assigned a new
        name.
        """
        return old in self.existing

    def clone(self):
        """
        Returns an independent copy of this namer and its state.
        """
        namer = UniqueNamer(self.prefix)
        namer.counter = self.counter
        namer.existing = dict(self.existing)
        namer.order = list(self.order)
        return namer
