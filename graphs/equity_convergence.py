import argparse
import json
from typing import Dict, List, Sequence

import matplotlib.pyplot as plt
import numpy as np

from holdem.helpers.equity import simulate_equity

# --- CONFIGURATION ---
DEFAULT_ITERS = (100, 250, 500, 1000, 2500, 5000, 10000)


def convergence_table(
    hero: str,
    opponent: str,
    board: str = "",
    iteration_counts: Sequence[int] = DEFAULT_ITERS,
    seeds: int = 10,
) -> Dict[str, np.ndarray]:
    """
    Run the simulator `seeds` times at every iteration count.
    Returns arrays: iters, mean, std (across seeds) and mean reported std_error.
    """
    iters = np.array(list(iteration_counts), dtype=int)
    samples = np.zeros((len(iters), seeds))
    reported = np.zeros((len(iters), seeds))

    for i, n in enumerate(iters):
        for s in range(seeds):
            res = simulate_equity(hero, opponent, board=board, iterations=int(n), seed=s)
            if not res.ok:
                raise ValueError(f"simulation failed: {res.error.value}")
            samples[i, s] = res.equity
            reported[i, s] = res.std_error

    return {
        "iters": iters,
        "mean": samples.mean(axis=1),
        "std": samples.std(axis=1),
        "std_error": reported.mean(axis=1),
    }


def plot_convergence(table: Dict[str, np.ndarray], title: str, out: str, show: bool = False) -> None:
    iters = table["iters"]
    mean = table["mean"]
    std = table["std"]

    plt.figure(figsize=(10, 6))
    plt.plot(iters, mean, marker='o', linestyle='-', color='#1f77b4', linewidth=2, label='Mean equity')
    plt.fill_between(iters, mean - std, mean + std, color='#1f77b4', alpha=0.2, label='±1 std across seeds')
    plt.plot(iters, mean + table["std_error"], color='gray', linestyle='--', linewidth=1, label='Reported std error')
    plt.plot(iters, mean - table["std_error"], color='gray', linestyle='--', linewidth=1)
    plt.axhline(mean[-1], color='red', linestyle=':', linewidth=1)
    plt.xscale('log')
    plt.title(title, fontsize=14, fontweight='bold')
    plt.xlabel('Iterations', fontsize=12)
    plt.ylabel('Equity (%)', fontsize=12)
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(out, dpi=150)
    print(f"Saved '{out}'")
    if show:
        plt.show()
    plt.close()


def plot_selfplay_net(dataset_file: str, out: str, show: bool = False) -> None:
    """Bar chart of net chips per position from a bot_selfplay dataset."""
    with open(dataset_file, 'r', encoding='utf-8') as f:
        data = json.load(f)
    net = data["final"]["net_by_position"]
    labels: List[str] = list(net.keys())
    values = np.array([net[k] for k in labels])

    plt.figure(figsize=(10, 6))
    colors = ['#2ca02c' if v >= 0 else '#d62728' for v in values]
    plt.bar(labels, values, color=colors, edgecolor='black', alpha=0.8)
    plt.axhline(0, color='black', linewidth=1)
    plt.title(f"Bot self-play: net chips by position ({data['final']['hands_played']} hands)", fontsize=14)
    plt.ylabel('Net chips', fontsize=12)
    plt.grid(True, axis='y', alpha=0.3)
    plt.tight_layout()
    plt.savefig(out, dpi=150)
    print(f"Saved '{out}'")
    if show:
        plt.show()
    plt.close()


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--hero", type=str, default="AhKh")
    ap.add_argument("--opponent", type=str, default="22+")
    ap.add_argument("--board", type=str, default="")
    ap.add_argument("--seeds", type=int, default=10)
    ap.add_argument("--out", type=str, default="graph_equity_convergence.png")
    ap.add_argument("--selfplay", type=str, default=None, help="optional bot_selfplay dataset to chart")
    ap.add_argument("--show", action="store_true")
    args = ap.parse_args()

    table = convergence_table(args.hero, args.opponent, board=args.board, seeds=args.seeds)
    for n, m, s in zip(table["iters"], table["mean"], table["std"]):
        print(f"{n:>6} iters: {m:6.2f}% ± {s:.2f}")
    plot_convergence(table, f"Equity convergence: {args.hero} vs {args.opponent}", args.out, show=args.show)

    if args.selfplay:
        plot_selfplay_net(args.selfplay, "graph_selfplay_net.png", show=args.show)


if __name__ == "__main__":
    main()
