#!/usr/bin/env python3
"""Generate synthetic master/client chargemaster workbooks.

Useful for trying the CLI end to end and for rough timing of large runs.
Client sheets deliberately mix code encodings (XXXXX-YY, XXXXXYY, separate
modifier column), contain a few duplicates and codes missing from the master.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

MODIFIERS = ["", "", "", "25", "50", "59", "XU", "76", "LT", "RT"]


def generate_master(rows: int, rng: np.random.Generator) -> pd.DataFrame:
    codes = rng.choice(np.arange(10000, 99999), size=rows, replace=False)
    mods = rng.choice(MODIFIERS, size=rows)
    hcpcs = [f"{c}-{m}" if m else str(c) for c, m in zip(codes, mods)]
    # 一部はマルチプライヤー付きコード
    for i in rng.choice(rows, size=max(1, rows // 50), replace=False):
        hcpcs[i] = f"{codes[i]}x{rng.integers(2, 5)}"
    return pd.DataFrame(
        {
            "HCPCS": hcpcs,
            "Description": [f"Procedure {c}" for c in codes],
            "Qty": 1,
            "Price": np.round(rng.uniform(5, 2500, rows), 2),
        }
    )


def generate_client(master: pd.DataFrame, rows: int, rng: np.random.Generator) -> pd.DataFrame:
    picked = master.sample(n=min(rows, len(master)), random_state=int(rng.integers(0, 2**31)))
    codes: list[str] = []
    for code in picked["HCPCS"]:
        if "-" in code and rng.random() < 0.5:
            code = code.replace("-", "")  # XXXXXYY
        codes.append(code)
    df = pd.DataFrame(
        {
            "Proc_Code": codes,
            "Desc": picked["Description"].str.upper().tolist(),
            "Units": rng.integers(1, 4, len(codes)),
            "Charge": np.round(picked["Price"].to_numpy() * rng.uniform(0.9, 1.2, len(codes)), 2),
        }
    )
    extra = pd.DataFrame(
        {"Proc_Code": ["A9999", "A9999"], "Desc": ["Unknown supply"] * 2, "Units": [1, 1], "Charge": [1.0, 1.0]}
    )
    return pd.concat([df, extra], ignore_index=True)


def main() -> int:
    p = argparse.ArgumentParser(description="Generate sample chargemaster workbooks")
    p.add_argument("--output", type=Path, default=Path("data"), help="Output directory")
    p.add_argument("--master-rows", type=int, default=1000)
    p.add_argument("--client-rows", type=int, default=400)
    p.add_argument("--clients", type=int, default=2)
    p.add_argument("--seed", type=int, default=42)
    args = p.parse_args()

    if args.master_rows < 1 or args.client_rows < 1:
        print("rows must be positive", file=sys.stderr)
        return 1

    rng = np.random.default_rng(args.seed)
    (args.output / "clients").mkdir(parents=True, exist_ok=True)

    master = generate_master(args.master_rows, rng)
    master.to_excel(args.output / "master.xlsx", sheet_name="Master", index=False)
    print(f"master: {args.output / 'master.xlsx'} rows={len(master)}")

    for i in range(args.clients):
        client = generate_client(master, args.client_rows, rng)
        path = args.output / "clients" / f"client_{i + 1}.xlsx"
        client.to_excel(path, sheet_name="Charges", index=False)
        print(f"client: {path} rows={len(client)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
