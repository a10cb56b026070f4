# Construction-time parameters for the register file variants.

import enum

class Variant(enum.Enum):
    """Storage core implementations sharing the register file port contract.

    COMB: reads return data in the cycle the address is presented.
    SEQ: reads return data one cycle after the address is presented.
    ARRAY: structural row array with one-hot decode; one cycle read latency.
    """
    COMB = "comb"
    SEQ = "seq"
    ARRAY = "array"

    @property
    def read_latency(self):
        if self is Variant.COMB:
            return 0
        return 1

class WriteCollision(enum.Enum):
    """What the array macro does when several write ports select one row in
    the same cycle."""
    # Lowest write port index wins.
    PRIORITY = "priority"
    # Treat it as a contract violation (Assert), falling back to PRIORITY in
    # logic.
    REJECT = "reject"

class RegFileConfig:
    """Shape of a physical register file.

    Parameters
    ----------
    num_registers (integer): number of rows, including the zero register.
    num_read_ports (integer): read ports, serviced every cycle.
    num_write_ports (integer): write ports, accepted every cycle.
    register_width (integer): bits per register.
    bypassable (sequence of boolean): one entry per write port; True means
        that port's write data is forwarded to same-cycle reads.
    fp (boolean): labels the file as holding floating point registers. Only
        affects the description.

    Attributes
    ----------
    addr_bits (integer): width of a register index.
    bypass_ports (tuple of integer): indices of the bypass-eligible ports.
    any_bypass (boolean): True if any write port is bypass-eligible.
    rf_cost (integer): rough port-count area metric, (R+W)*(R+2W).
    """

    def __init__(self, *,
                 num_registers,
                 num_read_ports,
                 num_write_ports,
                 register_width,
                 bypassable,
                 fp = False):
        bypassable = tuple(bool(b) for b in bypassable)

        assert num_registers > 1, \
                f"need at least two registers, got {num_registers}"
        assert num_read_ports > 0, "need at least one read port"
        assert num_write_ports > 0, "need at least one write port"
        assert register_width > 0, "register width must be positive"
        assert len(bypassable) == num_write_ports, \
                f"{len(bypassable)} bypass flags for {num_write_ports} write ports"

        self.num_registers = num_registers
        self.num_read_ports = num_read_ports
        self.num_write_ports = num_write_ports
        self.register_width = register_width
        self.bypassable = bypassable
        self.fp = fp

    @property
    def addr_bits(self):
        return max(1, (self.num_registers - 1).bit_length())

    @property
    def bypass_ports(self):
        return tuple(i for (i, b) in enumerate(self.bypassable) if b)

    @property
    def any_bypass(self):
        return len(self.bypass_ports) > 0

    @property
    def rf_cost(self):
        r, w = self.num_read_ports, self.num_write_ports
        return (r + w) * (r + 2 * w)

    # Addresses at or above num_registers fit in addr_bits only when the
    # register count isn't a power of two.
    @property
    def has_spare_addrs(self):
        return (1 << self.addr_bits) != self.num_registers

    def __repr__(self):
        return (f"RegFileConfig(num_registers={self.num_registers}, "
                f"num_read_ports={self.num_read_ports}, "
                f"num_write_ports={self.num_write_ports}, "
                f"register_width={self.register_width}, "
                f"bypassable={self.bypassable!r}, fp={self.fp!r})")

    def __str__(self):
        type_str = "Floating Point" if self.fp else "Integer"
        return (
            f"\n   =={type_str} Regfile=="
            f"\n   Num RF Read Ports     : {self.num_read_ports}"
            f"\n   Num RF Write Ports    : {self.num_write_ports}"
            f"\n   RF Cost (R+W)*(R+2W)  : {self.rf_cost}"
        )
