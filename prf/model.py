# Cycle-level reference model of the register file variants, for checking
# the hardware in simulation.

from collections import namedtuple

from prf.config import Variant, WriteCollision

Write = namedtuple("Write", ["addr", "data", "valid"], defaults = [True])

# One detected case of several bypass-eligible writes hitting one read.
Conflict = namedtuple("Conflict", ["cycle", "read_port", "write_ports"])

class RegFileModel:
    """Steps through register file behavior one cycle at a time.

    Each call to step() is one clock cycle: it takes this cycle's read
    addresses and write requests, returns what the read ports show during the
    cycle, and then commits the writes.

    For Variant.COMB the returned data answers this cycle's addresses. For
    Variant.SEQ and Variant.ARRAY it answers the previous cycle's addresses
    (zero on the first cycle, as if address 0 had been requested), captured
    before the previous cycle's writes landed, with this cycle's bypass
    applied.

    Parameters
    ----------
    config (RegFileConfig): register file shape.
    variant (Variant): which storage core to mimic.
    collision (WriteCollision): what to do with several valid writers to one
        non-zero register. PRIORITY keeps the lowest-numbered port's data;
        REJECT raises AssertionError.

    Attributes
    ----------
    regs (list of integer): register contents. regs[0] is never written.
    cycle (integer): number of completed steps.
    conflicts (list of Conflict): every multiple-bypass hit seen so far.
    """
    def __init__(self, config, variant = Variant.COMB,
                 collision = WriteCollision.PRIORITY):
        self.config = config
        self.variant = variant
        self.collision = collision
        self.mask = (1 << config.register_width) - 1

        self.regs = [0] * config.num_registers
        self.cycle = 0
        self.conflicts = []
        # (address, data) pairs captured by sequential reads last cycle.
        self._in_flight = [(0, 0)] * config.num_read_ports

    def read_array(self, addr):
        if addr == 0:
            return 0
        return self.regs[addr]

    def step(self, reads, writes):
        config = self.config
        writes = [w if isinstance(w, Write) else Write(*w) for w in writes]

        assert len(reads) == config.num_read_ports, \
                f"expected {config.num_read_ports} read addresses, got {len(reads)}"
        assert len(writes) == config.num_write_ports, \
                f"expected {config.num_write_ports} writes, got {len(writes)}"
        for (i, addr) in enumerate(reads):
            assert 0 <= addr < config.num_registers, \
                    f"read port {i} address {addr} out of range"
        for (i, w) in enumerate(writes):
            if w.valid:
                assert 0 <= w.addr < config.num_registers, \
                        f"write port {i} address {w.addr} out of range"

        if self.variant.read_latency == 0:
            compare = list(reads)
            raw = [self.read_array(a) for a in reads]
        else:
            compare = [a for (a, _) in self._in_flight]
            raw = [d for (_, d) in self._in_flight]
            # Captured now, before this cycle's writes land.
            self._in_flight = [(a, self.read_array(a)) for a in reads]

        result = [self._bypass(i, compare[i], raw[i], writes) for i in range(len(reads))]

        self._commit(writes)
        self.cycle += 1
        return result

    def _bypass(self, read_port, addr, raw, writes):
        if addr == 0:
            return raw
        hits = [
            i for i in self.config.bypass_ports
            if writes[i].valid and writes[i].addr == addr
        ]
        if len(hits) > 1:
            self.conflicts.append(Conflict(self.cycle, read_port, tuple(hits)))
        if hits:
            return writes[hits[0]].data & self.mask
        return raw

    def _commit(self, writes):
        written = {}
        for (i, w) in enumerate(writes):
            if not w.valid or w.addr == 0:
                continue
            if w.addr in written:
                assert self.collision != WriteCollision.REJECT, \
                        f"write ports {written[w.addr]} and {i} both write register {w.addr}"
                continue
            written[w.addr] = i
            self.regs[w.addr] = w.data & self.mask
