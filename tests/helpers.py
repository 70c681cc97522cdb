import hypothesis.strategies as st
from hypothesis import assume


@st.composite
def weights(draw, min_size=1, max_size=50):
    """Lists of non-negative weights with at least one non-zero entry.

    Non-zero float weights are kept well away from the subnormal range so
    that len(weights) / sum(weights) stays finite.
    """
    element = st.one_of(
        st.integers(0, 1000),
        st.just(0.0),
        st.floats(1e-3, 1e3),
    )
    result = draw(st.lists(element, min_size=min_size, max_size=max_size))
    assume(any(result))
    return result


class CountingRandom(object):
    """Wraps a random source and counts the draws made from it."""

    def __init__(self, random):
        self.random_source = random
        self.index_draws = 0
        self.float_draws = 0

    def randrange(self, n):
        self.index_draws += 1
        return self.random_source.randrange(n)

    def random(self):
        self.float_draws += 1
        return self.random_source.random()
