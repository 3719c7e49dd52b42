"""Hardware targets and the characteristics sent with every generation request."""

HARDWARE_TARGETS = ["ASIC", "FPGA", "TPU", "QPU", "OPU", "LPU", "GPU"]

TARGET_DESCRIPTIONS = {
    "ASIC": "Application-specific integrated circuit",
    "FPGA": "Field-programmable gate array",
    "TPU": "Tensor processing unit",
    "QPU": "Quantum processing unit",
    "OPU": "Optical processing unit",
    "LPU": "Language processing unit",
    "GPU": "Graphics processing unit",
}

CHARACTERISTICS = [
    "modular",
    "fault-tolerant",
    "security",
    "atomicity",
    "concurrent",
    "parallel",
    "distributed",
    "cache coherent",
    "encrypted",
    "protocol-driven",
    "robust",
    "asynchronous",
    "producer-consumer",
    "synchronized",
    "optimized",
    "lightweight",
]


def normalize_target(value):
    """Return the canonical target name, or None if it is not a known target."""
    if not value:
        return None
    target = value.strip().upper()
    return target if target in HARDWARE_TARGETS else None
