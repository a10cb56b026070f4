# Walks a small register file through the bypass scenario and prints what
# the read port sees each cycle, next to what the reference model expects.
#
# 8-bit registers, 3 registers, 2 read ports, 2 write ports; write port 0 is
# bypassable, port 1 is not.

import argparse

from amaranth.sim import Simulator

from prf.config import RegFileConfig, Variant
from prf.model import RegFileModel, Write
from prf.variants import RegisterFile

parser = argparse.ArgumentParser(
    prog = "sim-regfile",
    description = "Simulates the register file bypass scenario",
)
parser.add_argument("--variant", "-v",
                    choices = [v.value for v in Variant],
                    default = Variant.COMB.value)
parser.add_argument("--vcd", default = None,
                    help = "write a waveform trace to this file")
args = parser.parse_args()

variant = Variant(args.variant)
config = RegFileConfig(
    num_registers = 3,
    num_read_ports = 2,
    num_write_ports = 2,
    register_width = 8,
    bypassable = [True, False],
)
print(config)

uut = RegisterFile(config, variant)
model = RegFileModel(config, variant)

idle = Write(0, 0, False)
# (read addresses, writes) per cycle
script = [
    ([2, 0], [Write(2, 0x5A), idle]),
    ([2, 0], [idle, idle]),
    ([2, 1], [idle, Write(1, 0x33)]),
    ([2, 1], [idle, idle]),
    ([0, 1], [Write(0, 0xFF), idle]),
    ([0, 1], [idle, idle]),
]

async def bench(ctx):
    mismatches = 0
    for (cycle, (reads, writes)) in enumerate(script):
        for (port, addr) in zip(uut.read, reads):
            ctx.set(port.addr, addr)
        for (port, w) in zip(uut.write, writes):
            ctx.set(port.payload.addr, w.addr)
            ctx.set(port.payload.data, w.data)
            ctx.set(port.valid, w.valid)

        seen = [ctx.get(port.data) for port in uut.read]
        expected = model.step(reads, writes)
        flag = "" if seen == expected else "  <-- MISMATCH"
        if seen != expected:
            mismatches += 1
        print(f"cycle {cycle}: read {reads} -> "
              f"{' '.join(f'{v:02x}' for v in seen)} "
              f"(model {' '.join(f'{v:02x}' for v in expected)}){flag}")

        await ctx.tick()

    print(f"{variant.value}: {mismatches} mismatches")

sim = Simulator(uut)
sim.add_clock(1e-6)
sim.add_testbench(bench)

if args.vcd is not None:
    with sim.write_vcd(vcd_file = args.vcd):
        sim.run()
else:
    sim.run()
