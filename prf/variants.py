from prf.config import Variant, WriteCollision
from prf.regfile import CombRegFile, SeqRegFile
from prf.array import ArrayRegFile

def RegisterFile(config, variant = Variant.COMB, *,
                 collision = WriteCollision.PRIORITY):
    """Builds the register file storage core named by 'variant'.

    All variants have the same ports (see RegFileSignature) and differ only in
    read latency (variant.read_latency) and in how the storage is built.
    'collision' only matters for Variant.ARRAY; the memory-backed variants
    always let the lowest-numbered write port win.
    """
    if variant is Variant.COMB:
        return CombRegFile(config)
    if variant is Variant.SEQ:
        return SeqRegFile(config)
    if variant is Variant.ARRAY:
        return ArrayRegFile(config, collision)
    raise ValueError(f"unknown register file variant: {variant!r}")
