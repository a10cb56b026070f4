from amaranth import *
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out

from functools import reduce
from itertools import combinations

class StreamSig(wiring.Signature):
    def __init__(self, payload_shape):
        super().__init__({
            'payload': Out(payload_shape),
            'valid': Out(1),
            'ready': In(1),
        })

class AlwaysReady(wiring.Signature):
    def __init__(self, payload_shape):
        super().__init__({
            'payload': Out(payload_shape),
            'valid': Out(1),
        })

# Decodes a binary index into a one-hot vector of 'count' bits. Bit i is set
# when value == i. Values >= count decode to all zeroes.
def onehot(value, count):
    return Cat(*[value == i for i in range(count)])

# Builds a chained mux that selects between a set of options in priority
# order.
#
# 'options' is a list of pairs. The first element in each pair is evaluated as
# a boolean condition; the second is the value produced when that condition is
# the first one (lowest list index) to fire. If no condition fires, 'default'
# is produced.
#
# Unlike oneof, overlapping conditions are fine here: the earliest one wins.
def priority_choice(options, default):
    assert len(options) > 0
    result = default
    for (condition, value) in reversed(options):
        result = Mux(condition, value, result)
    return result

# Builds an output net that ORs together each value whose condition is set,
# out of AND and OR instead of muxes.
#
# 'options' is a list of pairs of (condition, value). The conditions are
# expected to be mutually exclusive; if more than one fires the result is the
# bitwise OR of their values. If none fire the result is zero.
def oneof(options):
    assert len(options) > 0
    output = []
    for (condition, value) in options:
        output.append(Mux(condition, value, 0))
    return reduce(lambda a, b: a | b, output)

# Produces a 1-bit net that is set when more than one of 'conditions' is set.
def multiple(conditions):
    pairs = [a & b for (a, b) in combinations(conditions, 2)]
    if len(pairs) == 0:
        return Const(0, 1)
    return reduce(lambda a, b: a | b, pairs)
