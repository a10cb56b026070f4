# Memory-backed register files with zero-cycle and one-cycle reads.

from amaranth import *
from amaranth.hdl import Assert
from amaranth.lib.wiring import *
from amaranth.lib.memory import Memory

from prf.bypass import BypassNetwork
from prf.ports import ReadPort, WritePort

# Port contract shared by every register file variant, seen from the register
# file.
def RegFileSignature(config):
    addr_bits = config.addr_bits
    width = config.register_width
    return Signature({
        'read': In(ReadPort(addr_bits, width)).array(config.num_read_ports),
        'write': In(WritePort(addr_bits, width)).array(config.num_write_ports),
        'bypass_hit': Out(1).array(config.num_read_ports),
        'bypass_conflict': Out(1).array(config.num_read_ports),
    })

def check_addresses(m, config, rf):
    """Adds simulation/formal checks that every read address, and every valid
    write address, names a real register. Addresses can only go out of range
    when the register count isn't a power of two."""
    if not config.has_spare_addrs:
        return
    n = config.num_registers
    for (i, port) in enumerate(rf.read):
        m.d.comb += Assert(port.addr < n,
                           f"read port {i} address out of range")
    for (i, port) in enumerate(rf.write):
        m.d.comb += Assert(~port.valid | (port.payload.addr < n),
                           f"write port {i} address out of range")

def write_enables(m, rf):
    """Computes the storage write enable for each write port.

    A port writes when it's valid, doesn't target register zero, and no
    lower-indexed port writes the same register this cycle. The last clause
    makes the lowest-indexed writer win, matching the bypass priority.
    """
    enables = []
    claimed = []
    for (i, port) in enumerate(rf.write):
        en = Signal(1, name = f"wen_{i}")
        wants = port.valid & (port.payload.addr != 0)
        shadowed = [
            other.valid & (other.payload.addr == port.payload.addr)
            for other in claimed
        ]
        if shadowed:
            m.d.comb += en.eq(wants & ~Cat(*shadowed).any())
        else:
            m.d.comb += en.eq(wants)
        enables.append(en)
        claimed.append(port)
    return enables

def attach_bypass(m, config, rf, compare, raw):
    """Drives each read port's data from the storage output 'raw', routing
    it through a BypassNetwork if any write port is bypass-eligible.

    'compare' holds, per read port, the address that was used to produce the
    corresponding 'raw' data.
    """
    if not config.any_bypass:
        for (i, port) in enumerate(rf.read):
            m.d.comb += [
                port.data.eq(raw[i]),
                rf.bypass_hit[i].eq(0),
                rf.bypass_conflict[i].eq(0),
            ]
        return

    m.submodules.bypass = bypass = BypassNetwork(config)
    for (i, port) in enumerate(rf.read):
        m.d.comb += [
            bypass.addr[i].eq(compare[i]),
            bypass.raw[i].eq(raw[i]),
            port.data.eq(bypass.data[i]),
            rf.bypass_hit[i].eq(bypass.hit[i]),
            rf.bypass_conflict[i].eq(bypass.conflict[i]),
        ]
    for (w, port) in zip(bypass.write, rf.write):
        m.d.comb += [
            w.valid.eq(port.valid),
            w.payload.addr.eq(port.payload.addr),
            w.payload.data.eq(port.payload.data),
        ]

def storage(config):
    return Memory(
        shape = unsigned(config.register_width),
        depth = config.num_registers,
        init = [],
    )

def attach_writes(m, rf, mem):
    """Gives each of rf's write ports its own write port on 'mem', enabled per
    write_enables, and holds every write port ready."""
    for (en, port) in zip(write_enables(m, rf), rf.write):
        wp = mem.write_port()
        m.d.comb += [
            wp.addr.eq(port.payload.addr),
            wp.data.eq(port.payload.data),
            wp.en.eq(en),

            # We never push back on a write.
            port.ready.eq(1),
        ]

class CombRegFile(Component):
    """Register file with combinational (zero latency) reads.

    Reads return register contents in the same cycle the address is
    presented. Writes land at the end of the cycle, so a same-cycle read of
    the register being written returns the old value unless the write comes
    in through a bypass-eligible port.

    Register zero reads as zero and ignores writes.

    Parameters
    ----------
    config (RegFileConfig): register file shape.

    Attributes
    ----------
    read (array of port): read ports; 'addr' in, 'data' out.
    write (array of port): write streams; always ready.
    bypass_hit (array of signal): per read port, set when a write was
        forwarded to it.
    bypass_conflict (array of signal): per read port, set when several
        bypass-eligible writers hit the register being read.
    """
    def __init__(self, config):
        self.config = config
        super().__init__(RegFileSignature(config))

    def elaborate(self, platform):
        m = Module()
        config = self.config

        m.submodules.mem = mem = storage(config)

        raw = []
        for (i, port) in enumerate(self.read):
            rp = mem.read_port(domain = "comb")
            data = Signal(config.register_width, name = f"raw_{i}")
            m.d.comb += [
                rp.addr.eq(port.addr),
                data.eq(Mux(port.addr == 0, 0, rp.data)),
            ]
            raw.append(data)

        attach_bypass(m, config, self, [p.addr for p in self.read], raw)
        attach_writes(m, self, mem)
        check_addresses(m, config, self)

        return m

class SeqRegFile(Component):
    """Register file with sequential (one cycle latency) reads.

    A read address presented in cycle T produces data in cycle T+1. The array
    read is not transparent: writes landing at the end of cycle T are not
    seen by a read captured in cycle T. Instead, the read address is
    registered alongside the data, and both the register zero check and the
    bypass comparison use that registered copy, so a write in cycle T+1 to
    the register being delivered is forwarded.

    Writes are not delayed; they land at the end of the cycle they're issued.

    Parameters
    ----------
    config (RegFileConfig): register file shape.

    Attributes
    ----------
    Same as CombRegFile.
    """
    def __init__(self, config):
        self.config = config
        super().__init__(RegFileSignature(config))

    def elaborate(self, platform):
        m = Module()
        config = self.config

        m.submodules.mem = mem = storage(config)

        raw = []
        compare = []
        for (i, port) in enumerate(self.read):
            rp = mem.read_port()
            # Address of the data currently coming out of rp.
            addr_q = Signal(config.addr_bits, name = f"raddr_q_{i}")
            data = Signal(config.register_width, name = f"raw_{i}")
            m.d.sync += addr_q.eq(port.addr)
            m.d.comb += [
                rp.addr.eq(port.addr),
                rp.en.eq(1),
                data.eq(Mux(addr_q == 0, 0, rp.data)),
            ]
            raw.append(data)
            compare.append(addr_q)

        attach_bypass(m, config, self, compare, raw)
        attach_writes(m, self, mem)
        check_addresses(m, config, self)

        return m
