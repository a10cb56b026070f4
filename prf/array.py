# Register file built on a structural row array with one-hot controls.
#
# The array itself (StorageMacro) knows nothing about addresses: it has a
# write enable and write select per row, and an output enable per row telling
# it which read ports are looking at that row. ArrayAdapter does the address
# decoding, and ArrayRegFile wraps the two with the register zero and bypass
# behavior that the other variants provide.

from amaranth import *
from amaranth.hdl import Assert
from amaranth.lib.wiring import *

from prf import onehot, oneof, priority_choice, multiple
from prf.config import WriteCollision
from prf.ports import ReadPort, WritePort
from prf.regfile import RegFileSignature, attach_bypass, check_addresses

# Control and data lines of the storage macro, seen from the side driving it.
def MacroPort(config):
    nrows = config.num_registers
    width = config.register_width
    return Signature({
        # write enable, one bit per row
        'we': Out(nrows),
        # write data, per write port
        'wd': Out(width).array(config.num_write_ports),
        # write select per row: bit i set means latch write port i's data
        'ws': Out(config.num_write_ports).array(nrows),
        # output enable per row: bit i set means read port i is reading it
        'oe': Out(config.num_read_ports).array(nrows),
        # read data, per read port
        'rd': In(width).array(config.num_read_ports),
    })

class ArrayAdapter(Component):
    """Translates addressed read and write ports into StorageMacro controls.

    Every address is one-hot decoded across the rows. For row r:

    - oe[r] collects bit r of each read port's decoded address,
    - ws[r] collects bit r of each write port's decoded address, gated by that
      port's valid,
    - we[r] is set when any bit of ws[r] is.

    No special handling of register zero and no bypass happens here: a valid
    write to address 0 enables row 0, and a read of address 0 returns whatever
    row 0 holds. Wrap this (see ArrayRegFile) to get register file semantics.

    Out-of-range read addresses, and valid write addresses, trip an Assert.

    Parameters
    ----------
    config (RegFileConfig): register file shape. Bypass flags are ignored.

    Attributes
    ----------
    read (array of port): read ports.
    write (array of port): write streams; always ready.
    macro (port): connection to a StorageMacro.
    collision (signal): set when some row is selected by more than one valid
        write port this cycle.
    """
    def __init__(self, config):
        self.config = config
        super().__init__(Signature({
            'read': In(ReadPort(config.addr_bits,
                                config.register_width)).array(config.num_read_ports),
            'write': In(WritePort(config.addr_bits,
                                  config.register_width)).array(config.num_write_ports),
            'macro': Out(MacroPort(config)),
            'collision': Out(1),
        }))

    def elaborate(self, platform):
        m = Module()
        nrows = self.config.num_registers

        waddr_oh = []
        for (i, port) in enumerate(self.write):
            oh = Signal(nrows, name = f"waddr_oh_{i}")
            m.d.comb += [
                oh.eq(onehot(port.payload.addr, nrows)),
                self.macro.wd[i].eq(port.payload.data),
                port.ready.eq(1),
            ]
            waddr_oh.append(oh)

        raddr_oh = []
        for (i, port) in enumerate(self.read):
            oh = Signal(nrows, name = f"raddr_oh_{i}")
            m.d.comb += [
                oh.eq(onehot(port.addr, nrows)),
                port.data.eq(self.macro.rd[i]),
            ]
            raddr_oh.append(oh)

        row_collisions = []
        for r in range(nrows):
            ws = self.macro.ws[r]
            m.d.comb += [
                self.macro.oe[r].eq(Cat(*[oh[r] for oh in raddr_oh])),
                ws.eq(Cat(*[
                    oh[r] & port.valid
                    for (oh, port) in zip(waddr_oh, self.write)
                ])),
                self.macro.we[r].eq(ws.any()),
            ]
            row_collisions.append(multiple([ws[i] for i in range(len(self.write))]))

        m.d.comb += self.collision.eq(Cat(*row_collisions).any())

        check_addresses(m, self.config, self)

        return m

class StorageMacro(Component):
    """Behavioral model of the row array behind ArrayAdapter.

    Writes land at the end of the cycle in every row whose 'we' bit is set,
    taking the data of the write port picked by that row's 'ws' vector. Reads
    are synchronous: at each clock edge, 'rd[i]' captures the row whose 'oe'
    vector has bit i set, before that edge's writes land. A read port with no
    row enabled reads zero.

    More than one 'ws' bit in a row is resolved according to 'collision':

    - WriteCollision.PRIORITY: the lowest-numbered write port wins.
    - WriteCollision.REJECT: an Assert fires; logic still behaves as PRIORITY.

    Parameters
    ----------
    config (RegFileConfig): register file shape.
    collision (WriteCollision): multiple-writer policy.

    Attributes
    ----------
    port (port): control and data lines, driven by ArrayAdapter.
    """
    def __init__(self, config, collision = WriteCollision.PRIORITY):
        self.config = config
        self.collision = collision
        super().__init__(Signature({
            'port': In(MacroPort(config)),
        }))

    def elaborate(self, platform):
        m = Module()
        config = self.config
        nw = config.num_write_ports

        rows = [Signal(config.register_width, name = f"row_{r}")
                for r in range(config.num_registers)]

        for (r, row) in enumerate(rows):
            ws = self.port.ws[r]
            selects = [ws[i] for i in range(nw)]
            with m.If(self.port.we[r]):
                m.d.sync += row.eq(priority_choice(
                    [(s, self.port.wd[i]) for (i, s) in enumerate(selects)],
                    row,
                ))
                if self.collision == WriteCollision.REJECT:
                    m.d.comb += Assert(~multiple(selects),
                                       f"multiple writers selected row {r}")

        for i in range(config.num_read_ports):
            m.d.sync += self.port.rd[i].eq(oneof([
                (self.port.oe[r][i], row) for (r, row) in enumerate(rows)
            ]))

        return m

class ArrayRegFile(Component):
    """Register file on top of ArrayAdapter and StorageMacro.

    Adds what the adapter leaves out:

    - writes to register zero are dropped before they reach the array,
    - reads of register zero return zero, judged on the registered read
      address since the array answers one cycle later,
    - bypass-eligible writes are forwarded to reads whose registered address
      matches, as in SeqRegFile.

    Timing matches SeqRegFile: data for an address presented in cycle T
    appears in cycle T+1.

    Parameters
    ----------
    config (RegFileConfig): register file shape.
    collision (WriteCollision): passed to the StorageMacro.

    Attributes
    ----------
    Same as CombRegFile, plus:

    write_collision (signal): set when several valid writers target the same
        non-zero register this cycle.
    """
    def __init__(self, config, collision = WriteCollision.PRIORITY):
        self.config = config
        self.collision_policy = collision
        sig = RegFileSignature(config)
        super().__init__(Signature({
            **sig.members,
            'write_collision': Out(1),
        }))

    def elaborate(self, platform):
        m = Module()
        config = self.config

        m.submodules.adapter = adapter = ArrayAdapter(config)
        m.submodules.macro = macro = StorageMacro(config, self.collision_policy)
        connect(m, adapter.macro, macro.port)

        for (port, inner) in zip(self.write, adapter.write):
            m.d.comb += [
                inner.payload.addr.eq(port.payload.addr),
                inner.payload.data.eq(port.payload.data),
                inner.valid.eq(port.valid & (port.payload.addr != 0)),
                port.ready.eq(1),
            ]

        raw = []
        compare = []
        for (i, (port, inner)) in enumerate(zip(self.read, adapter.read)):
            addr_q = Signal(config.addr_bits, name = f"raddr_q_{i}")
            data = Signal(config.register_width, name = f"raw_{i}")
            m.d.sync += addr_q.eq(port.addr)
            m.d.comb += [
                inner.addr.eq(port.addr),
                data.eq(Mux(addr_q == 0, 0, inner.data)),
            ]
            raw.append(data)
            compare.append(addr_q)

        attach_bypass(m, config, self, compare, raw)

        m.d.comb += self.write_collision.eq(adapter.collision)

        return m
