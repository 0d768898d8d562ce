import numpy as np
import matplotlib.pyplot as plt


class UtilisationRecorder:
    """
    Collects the per-airport status snapshot after every cycle.

    Pass ``recorder.record`` as the ``on_cycle`` hook of
    ``SimulationEngine.run_simulation``.
    """

    def __init__(self):
        self.times = []
        self.snapshots = []

    def record(self, engine):
        self.times.append(engine.current_simulation_time())
        self.snapshots.append(engine.airport_status())

    def __len__(self):
        return len(self.snapshots)

    def airport_names(self):
        if not self.snapshots:
            return []
        return [row["name"] for row in self.snapshots[0]]

    def occupancy(self, resource="gates"):
        """
        Fraction of gates (or runways) held, shaped (cycles, airports).
        """
        if resource not in ("gates", "runways"):
            raise ValueError(f"Unknown resource: {resource}")
        if not self.snapshots:
            return np.zeros((0, 0))

        total = np.array([[row[f"total_{resource}"] for row in snap] for snap in self.snapshots], dtype=float)
        available = np.array([[row[f"available_{resource}"] for row in snap] for snap in self.snapshots],
                             dtype=float)
        return (total - available) / total

    def security_backlog(self):
        if not self.snapshots:
            return np.zeros((0, 0))
        return np.array([[row["security_backlog"] for row in snap] for snap in self.snapshots], dtype=float)


def summarise_utilisation(recorder):
    """
    Mean and peak occupancy per airport.

    Returns a list of dicts sorted by mean gate occupancy, busiest first.
    """
    if not len(recorder):
        return []

    gates = recorder.occupancy("gates")
    runways = recorder.occupancy("runways")
    backlog = recorder.security_backlog()

    summary = []
    for i, name in enumerate(recorder.airport_names()):
        summary.append({
            "name": name,
            "mean_gate_occupancy": float(np.mean(gates[:, i])),
            "peak_gate_occupancy": float(np.max(gates[:, i])),
            "mean_runway_occupancy": float(np.mean(runways[:, i])),
            "peak_runway_occupancy": float(np.max(runways[:, i])),
            "peak_security_backlog": int(np.max(backlog[:, i])),
        })
    summary.sort(key=lambda row: row["mean_gate_occupancy"], reverse=True)
    return summary


def print_utilisation_summary(summary):
    print(f"\n{'='*86}")
    print(f"{'AIRPORT RESOURCE UTILISATION':<86}")
    print(f"{'='*86}")
    print(f"{'Airport':<40} {'Gate mean':>10} {'Gate peak':>10} {'Rwy mean':>10} {'Rwy peak':>10}")
    print("-" * 86)
    for row in summary:
        print(f"{row['name']:<40} {row['mean_gate_occupancy']:>10.0%} {row['peak_gate_occupancy']:>10.0%} "
              f"{row['mean_runway_occupancy']:>10.0%} {row['peak_runway_occupancy']:>10.0%}")
    print(f"{'='*86}\n")


def plot_utilisation(recorder, top_n=6, show=True):
    """
    Gate occupancy over time for the busiest airports, plus mean occupancy
    of every airport as a bar chart.
    """
    if not len(recorder):
        print("No utilisation data to plot.")
        return None

    gates = recorder.occupancy("gates")
    runways = recorder.occupancy("runways")
    names = recorder.airport_names()
    cycles = np.arange(1, len(recorder) + 1)

    busiest = np.argsort(gates.mean(axis=0))[::-1][:top_n]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    for i in busiest:
        ax1.plot(cycles, gates[:, i] * 100, marker='o', markersize=3, label=names[i])
    ax1.set_xlabel('Cycle', fontsize=9, fontweight='bold')
    ax1.set_ylabel('Gates held (%)', fontsize=9, fontweight='bold')
    ax1.set_title('Gate Occupancy (busiest airports)', fontsize=10, fontweight='bold')
    ax1.set_ylim(0, 105)
    ax1.grid(alpha=0.3, linestyle='--')
    ax1.legend(fontsize=7)

    y_pos = np.arange(len(names))
    ax2.barh(y_pos - 0.2, gates.mean(axis=0) * 100, height=0.4, color='#3498db',
             edgecolor='black', linewidth=0.5, label='Gates')
    ax2.barh(y_pos + 0.2, runways.mean(axis=0) * 100, height=0.4, color='#f39c12',
             edgecolor='black', linewidth=0.5, label='Runways')
    ax2.set_yticks(y_pos)
    ax2.set_yticklabels(names, fontsize=7)
    ax2.set_xlabel('Mean occupancy (%)', fontsize=9, fontweight='bold')
    ax2.set_title('Mean Resource Occupancy', fontsize=10, fontweight='bold')
    ax2.grid(axis='x', alpha=0.3)
    ax2.legend(fontsize=8)

    fig.tight_layout()
    if show:
        plt.show()
    return fig
