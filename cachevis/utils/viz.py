import plotly.express as px
import pandas as pd

from ..core.decoder import format_address


def history_frame(history) -> pd.DataFrame:
    """Builds a DataFrame with one row per access, in access order."""
    columns = ["step", "address", "hex", "outcome", "set", "way", "tag", "offset", "evicted_tag"]
    if not history:
        return pd.DataFrame(columns=columns)
    rows = []
    for i, r in enumerate(history):
        rows.append({
            "step": i,
            "address": r.address,
            "hex": format_address(r.address),
            "outcome": "HIT" if r.hit else "MISS",
            "set": r.set_index,
            "way": r.way,
            "tag": r.tag,
            "offset": r.block_offset,
            "evicted_tag": r.evicted_tag,
        })
    return pd.DataFrame(rows, columns=columns)


def export_access_timeline(history, path: str, title: str = "Cache Access Timeline"):
    if not history:
        with open(path, "w") as f:
            f.write(f"<h1>{title}</h1><p>No data to display.</p>")
        return

    df = history_frame(history)
    df["slot"] = "set " + df["set"].astype(str) + " / way " + df["way"].astype(str)

    fig = px.scatter(
        df,
        x="step",
        y="slot",
        color="outcome",
        color_discrete_map={"HIT": "green", "MISS": "red"},
        hover_name="hex",
        hover_data=["tag", "offset", "evicted_tag"],
        title=title,
        labels={"step": "Access", "slot": "Cache Line"},
    )

    fig.update_yaxes(autorange="reversed", categoryorder="category ascending")
    fig.update_layout(
        height=max(400, df["slot"].nunique() * 25),
        font=dict(family="Courier New, monospace", size=12),
        legend_title="Outcome",
    )

    fig.write_html(path, include_plotlyjs="cdn", full_html=True)


def export_occupancy_ascii(snapshot, last_result=None):
    if not snapshot:
        return "Cache is empty."

    ways = len(snapshot[0])
    highlight = (last_result.set_index, last_result.way) if last_result is not None else None

    header = f"{'Set':>5} |" + "".join(f"{'Way ' + str(w):^12}|" for w in range(ways))
    rule = "-" * len(header)
    chart = "Cache Contents (tag@last_used, * = last access)\n"
    chart += rule + "\n" + header + "\n" + rule + "\n"

    for set_index, cache_set in enumerate(snapshot):
        chart += f"{set_index:>5} |"
        for way, line in enumerate(cache_set):
            cell = f"{line.tag:#x}@{line.last_used}" if line.valid else "-"
            if highlight == (set_index, way):
                cell = "*" + cell
            chart += f"{cell:^12}|"
        chart += "\n"

    chart += rule + "\n"
    return chart


def export_history_ascii(history, window=None):
    if not history:
        return "No accesses yet."

    if window is None:
        rows = history
    elif window <= 0:
        return "No accesses in window."
    else:
        rows = history[-window:]
    chart = f"{'Address':<12} {'Result':<6} {'Set':>4} {'Way':>4} {'Tag':>8}\n"
    for r in rows:
        chart += (f"{format_address(r.address):<12} {'HIT' if r.hit else 'MISS':<6} "
                  f"{r.set_index:>4} {r.way:>4} {r.tag:>#8x}\n")
    return chart
