import os
import pathlib

_default_data_dir = pathlib.Path(os.getenv("HUMTEMP_DATA_DIR", "."))

LAB_SHEET_PATH = pathlib.Path(os.getenv("HUMTEMP_LAB_PATH", str(_default_data_dir / "LAB.xlsx")))
HOLDING_SHEET_PATH = pathlib.Path(
    os.getenv("HUMTEMP_HOLDING_PATH", str(_default_data_dir / "HOLDING.xlsx"))
)
OUTPUT_DIR = pathlib.Path(os.getenv("HUMTEMP_OUTPUT_DIR", "Output"))
