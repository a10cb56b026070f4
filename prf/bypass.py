# Write-to-read forwarding shared by all storage variants.

from amaranth import *
from amaranth.lib.wiring import *

from prf import AlwaysReady, priority_choice, multiple
from prf.ports import RegWrite

class BypassNetwork(Component):
    """Forwards this cycle's write data to reads of the same register.

    For each read port, every bypass-eligible write port that is valid, targets
    a non-zero register, and matches the read's compare address is a
    candidate. With no candidate the raw storage data passes through. With one
    or more, the lowest-indexed candidate's data wins; more than one is an
    upstream contract violation and is reported on 'conflict', but resolved
    anyway.

    Register zero is never forwarded, so its raw data (always zero from the
    storage core) passes through regardless of writes.

    Parameters
    ----------
    config (RegFileConfig): port counts, widths, and which write ports are
        bypass-eligible. At least one must be.

    Attributes
    ----------
    addr (array of signal): per read port, the address to compare writes
        against. This is the read address for zero-latency storage and the
        registered read address for one-cycle storage.
    raw (array of signal): per read port, data from the storage core.
    write (array of port): every write port of the register file. Ports that
        aren't bypass-eligible are ignored.
    data (array of signal): per read port, data after forwarding.
    hit (array of signal): per read port, set when a write was forwarded.
    conflict (array of signal): per read port, set when more than one write
        port was a candidate.
    """
    def __init__(self, config):
        assert config.any_bypass, \
                "bypass network requires at least one bypass-eligible write port"
        self.config = config

        nr = config.num_read_ports
        nw = config.num_write_ports
        width = config.register_width
        super().__init__(Signature({
            'addr': In(config.addr_bits).array(nr),
            'raw': In(width).array(nr),
            'write': In(AlwaysReady(RegWrite(config.addr_bits, width))).array(nw),
            'data': Out(width).array(nr),
            'hit': Out(1).array(nr),
            'conflict': Out(1).array(nr),
        }))

    def elaborate(self, platform):
        m = Module()

        eligible = [(j, self.write[j]) for j in self.config.bypass_ports]

        for (i, addr) in enumerate(self.addr):
            candidates = []
            for (j, w) in eligible:
                c = Signal(1, name = f"bypass_{i}_from_{j}")
                m.d.comb += c.eq(
                    w.valid
                    & (w.payload.addr != 0)
                    & (w.payload.addr == addr)
                )
                candidates.append(c)

            m.d.comb += [
                self.hit[i].eq(Cat(*candidates).any()),
                self.conflict[i].eq(multiple(candidates)),
                self.data[i].eq(priority_choice(
                    [(c, w.payload.data) for (c, (_, w)) in zip(candidates, eligible)],
                    self.raw[i],
                )),
            ]

        return m
