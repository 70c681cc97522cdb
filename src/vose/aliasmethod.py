"""Weighted sampling using Vose's algorithm for the Alias Method.

An alias table is built once, in O(n), from a collection of weighted items
and can then be sampled from in O(1). Every slot of the table carries an
equal 1/n share of the probability mass, split between at most two items.

See http://www.keithschwarz.com/darts-dice-coins/ for details.
"""

import logging
from pyrsistent import PClass, field, pvector


logger = logging.getLogger(__name__)


class EmptyDistribution(ValueError):
    pass


class InvalidWeight(ValueError):
    pass


def _index_invariant(i):
    return (i >= 0, 'Negative index')


class Aliased(PClass):
    """A slot shared between two items. Resolves to ``value`` with probability
    ``threshold`` and to ``alias`` otherwise."""
    threshold = field(mandatory=True)
    value = field(type=int, mandatory=True, invariant=_index_invariant)
    alias = field(type=int, mandatory=True, invariant=_index_invariant)


class Unaliased(PClass):
    """A slot that always resolves to a single item."""
    index = field(type=int, mandatory=True, invariant=_index_invariant)


def _is_finite(x):
    # inf - inf and nan - nan are both NaN, which compares unequal to 0.
    return x - x == 0


def _pair_up(ps):
    small = []
    large = []

    for i, p in enumerate(ps):
        if p < 1:
            small.append((i, p))
        else:
            large.append((i, p))

    entries = []

    while small and large:
        l, p_l = small.pop()
        g, p_g = large.pop()
        entries.append(Aliased(threshold=p_l, value=l, alias=g))
        p_g = (p_g + p_l) - 1
        if p_g < 1:
            small.append((g, p_g))
        else:
            large.append((g, p_g))

    # Rounding can leave either side non-empty here, and whatever is left
    # gets a whole slot regardless of its nominal probability.
    for q in [large, small]:
        while q:
            g, _ = q.pop()
            entries.append(Unaliased(index=g))

    return entries


class AliasTable(object):
    """An immutable table of items that can be sampled from in proportion to
    the weights they were built with.

    Tables are normally constructed with :func:`build` (or the equivalent
    :meth:`from_iter`), which takes (item, weight) pairs. Weights may be of
    any numeric type that can be summed, divided into an int and compared
    against 0 and 1, so exact types such as Fraction work as well as floats.

    Calling the constructor directly with prebuilt entries is supported; it
    raises ValueError if an entry is malformed or refers to a missing item.
    """

    def __init__(self, items, entries):
        items = pvector(items)
        entries = pvector(entries)
        if len(items) != len(entries):
            raise ValueError(
                "Got %d entries for %d items" % (len(entries), len(items)))
        for e in entries:
            if isinstance(e, Aliased):
                indices = (e.value, e.alias)
            elif isinstance(e, Unaliased):
                indices = (e.index,)
            else:
                raise ValueError("%r is not a table entry" % (e,))
            if any(i >= len(items) for i in indices):
                raise ValueError(
                    "Entry %r refers past the end of %d items" % (
                        e, len(items)))
        self.__items = items
        self.__entries = entries

    @classmethod
    def from_iter(cls, weighted_items):
        items = []
        weights = []
        for item, weight in weighted_items:
            # Written this way round so that NaN is rejected too.
            if not (weight >= 0):
                raise InvalidWeight(
                    "Weight %r for item %r is not a non-negative number" % (
                        weight, item))
            items.append(item)
            weights.append(weight)

        if not items:
            raise EmptyDistribution("Cannot build an alias table from no items")

        total = sum(weights)
        if not _is_finite(total):
            raise InvalidWeight("Total weight %r is not finite" % (total,))
        if not (total > 0):
            raise EmptyDistribution(
                "Total weight %r of %d items is not positive" % (
                    total, len(items)))

        scale = len(weights) / total
        if not _is_finite(scale):
            raise EmptyDistribution(
                "Total weight %r of %d items is too small to scale" % (
                    total, len(items)))
        entries = _pair_up([w * scale for w in weights])

        result = cls(items, entries)
        logger.debug(
            "Built alias table with %d entries, %d of them aliased",
            len(entries), sum(isinstance(e, Aliased) for e in entries))
        return result

    @classmethod
    def from_weights(cls, weights, options=None):
        """Build a table over ``options`` where ``options[i]`` has weight
        ``weights[i]``. If options is omitted the table samples the indices
        of weights."""
        weights = list(weights)
        if options is None:
            options = range(len(weights))
        options = list(options)
        if len(options) != len(weights):
            raise ValueError(
                "Got %d weights for %d options" % (len(weights), len(options)))
        return cls.from_iter(zip(options, weights))

    @property
    def items(self):
        return self.__items

    @property
    def entries(self):
        return self.__entries

    def __len__(self):
        return len(self.__entries)

    def pick(self, random):
        """Return one item, chosen with probability proportional to its
        weight.

        random must provide randrange(n) and random(), as random.Random does.
        Only slots that are shared between two items consume a float draw.
        """
        entry = self.__entries[random.randrange(len(self.__entries))]
        if isinstance(entry, Unaliased):
            return self.__items[entry.index]
        if random.random() < entry.threshold:
            return self.__items[entry.value]
        else:
            return self.__items[entry.alias]

    def draw(self, random):
        """Repeatedly pick from the table using random and yield the
        results. Never terminates on its own."""
        while True:
            yield self.pick(random)

    def distribution(self):
        """Reconstruct the probability of each item from the table entries."""
        n = len(self.__entries)
        mass = [0] * n
        for e in self.__entries:
            if isinstance(e, Unaliased):
                mass[e.index] += 1
            else:
                mass[e.value] += e.threshold
                mass[e.alias] += 1 - e.threshold
        return [m / n for m in mass]

    def __repr__(self):
        return 'AliasTable(%r)' % (list(self.__entries),)


def build(weighted_items):
    """Build an AliasTable from an iterable of (item, weight) pairs.

    Weights must be non-negative and not all zero, and their total must be
    finite and large enough that len(weights) / total is finite too. Raises
    InvalidWeight for a negative or NaN weight or an infinite total, and
    EmptyDistribution when there is nothing to sample from or the total is
    too small to scale.
    """
    return AliasTable.from_iter(weighted_items)
