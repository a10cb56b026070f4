# Emits Verilog for one register file configuration.
#
# Example: a 64-entry, 6-read, 3-write integer file with the two ALU write
# ports bypassable:
#
#   python gen-regfile.py -r 64 --reads 6 --writes 3 --bypass 1,1,0 -o rf.v

import argparse
from pathlib import Path

from amaranth.back import verilog

from prf.config import RegFileConfig, Variant, WriteCollision
from prf.variants import RegisterFile

def bypass_flags(text):
    return [bool(int(flag)) for flag in text.split(",") if flag != ""]

parser = argparse.ArgumentParser(
    prog = "gen-regfile",
    description = "Generates Verilog for a multi-ported physical register file",
)
parser.add_argument("--variant", "-v",
                    choices = [v.value for v in Variant],
                    default = Variant.COMB.value,
                    help = "storage core (default: comb)")
parser.add_argument("--registers", "-r", type = int, default = 64,
                    help = "number of physical registers, including zero")
parser.add_argument("--reads", type = int, default = 2,
                    help = "number of read ports")
parser.add_argument("--writes", type = int, default = 1,
                    help = "number of write ports")
parser.add_argument("--width", "-w", type = int, default = 64,
                    help = "register width in bits")
parser.add_argument("--bypass", type = bypass_flags, default = None,
                    help = "comma-separated 0/1 flag per write port; default none")
parser.add_argument("--fp", action = "store_true",
                    help = "label as a floating point register file")
parser.add_argument("--collision",
                    choices = [c.value for c in WriteCollision],
                    default = WriteCollision.PRIORITY.value,
                    help = "array variant policy for colliding writers")
parser.add_argument("--name", default = "regfile",
                    help = "Verilog module name")
parser.add_argument("--output", "-o", default = None,
                    help = "output file (default: <name>.v)")
args = parser.parse_args()

bypassable = args.bypass
if bypassable is None:
    bypassable = [False] * args.writes

config = RegFileConfig(
    num_registers = args.registers,
    num_read_ports = args.reads,
    num_write_ports = args.writes,
    register_width = args.width,
    bypassable = bypassable,
    fp = args.fp,
)
print(config)
print(f"   Variant               : {args.variant}")

rf = RegisterFile(config, Variant(args.variant),
                  collision = WriteCollision(args.collision))

output = Path(args.output or f"{args.name}.v")
output.write_text(verilog.convert(rf, name = args.name))
print(f"wrote {output}")
