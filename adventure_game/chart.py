"""Leaderboard bar chart: player xp with level bands."""

from __future__ import annotations

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt

from adventure_game.levels import xp_required_for_level

LEVEL_COLORS = ["#FFD166", "#06D6A0", "#118AB2", "#EF476F", "#8338EC"]


def make_leaderboard_chart(
    entries: list[dict],
    output_path: str = "leaderboard.png",
    title: str = "Reading Adventure Leaderboard",
) -> str:
    """Plot each player's xp as a horizontal bar coloured by level.

    *entries* are leaderboard rows with ``username``, ``xp`` and ``level``.
    Dashed lines mark where each level starts. Returns *output_path*.
    """
    if not entries:
        raise ValueError("No leaderboard entries to chart")

    rows = sorted(entries, key=lambda e: e["xp"], reverse=True)
    top = max(r["xp"] for r in rows)
    right = max(top * 1.25, 250)

    fig, ax = plt.subplots(figsize=(9, 1.5 + 0.6 * len(rows)))
    colors = [LEVEL_COLORS[(r["level"] - 1) % len(LEVEL_COLORS)] for r in rows]
    ax.barh([r["username"] for r in rows], [r["xp"] for r in rows], color=colors)

    level = 2
    while xp_required_for_level(level) < right:
        threshold = xp_required_for_level(level)
        ax.axvline(threshold, color="grey", linestyle="--", linewidth=0.8)
        ax.annotate(f"Lvl {level}", (threshold, 1.0), xycoords=("data", "axes fraction"),
                    xytext=(2, -12), textcoords="offset points", fontsize=8, color="grey")
        level += 1

    for i, row in enumerate(rows):
        ax.annotate(f"{row['xp']} XP", (row["xp"], i), xytext=(4, 0),
                    textcoords="offset points", va="center", fontsize=10)

    ax.set_xlim(0, right)
    ax.set_xlabel("XP")
    ax.set_title(title)
    ax.invert_yaxis()

    fig.tight_layout()
    fig.savefig(output_path, dpi=120)
    plt.close(fig)
    return output_path
