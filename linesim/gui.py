"""Graphical user interface for the line simulator."""
from __future__ import annotations

import copy
import queue
import threading
import tkinter as tk
from dataclasses import dataclass, field
from tkinter import messagebox
from typing import Dict, List, Optional

from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure
from tkinter import ttk

from .app import parse_items
from .charts import plot_distribution
from .distributions import DistributionConfig, DistributionFactory
from .entities import LineSpec, SegmentRecord, build_line
from .monte_carlo import MonteCarloResult, MonteCarloSummary, run_monte_carlo, summarize_results


@dataclass
class SegmentDefinition:
    """Editable holding segment backing the GUI."""

    name: str
    distribution_type: str
    parameters: Dict[str, float] = field(default_factory=dict)

    def describe(self) -> str:
        try:
            return DistributionFactory.from_config(self.config()).description
        except ValueError:
            return f"{self.distribution_type.title()} (?)"

    def config(self) -> DistributionConfig:
        return DistributionConfig(type=self.distribution_type, parameters=self.parameters)

    def service(self) -> Dict[str, float]:
        return {"type": self.distribution_type, **self.parameters}


@dataclass
class LineDefinition:
    """Editable line for the GUI; the ejecting segment is implicit and always last."""

    name: str
    segments: List[SegmentDefinition]

    def to_spec(self) -> LineSpec:
        names = [segment.name for segment in self.segments] + ["eject"]
        records = [
            SegmentRecord(id=names[idx], to=names[idx + 1], service=segment.service())
            for idx, segment in enumerate(self.segments)
        ]
        records.append(SegmentRecord(id=names[-1]))
        return LineSpec(segments=records, entry=names[0], terminal=names[-1], name=self.name)


def _build_sample_lines() -> Dict[str, LineDefinition]:
    poisson = {"mean": 2.0}
    demo = LineDefinition(
        name="Demo line",
        segments=[SegmentDefinition(name=f"s{idx}", distribution_type="poisson", parameters=dict(poisson)) for idx in range(2)],
    )
    mixed = LineDefinition(
        name="Mixed line",
        segments=[
            SegmentDefinition(name="s0", distribution_type="constant", parameters={"value": 1}),
            SegmentDefinition(name="s1", distribution_type="poisson", parameters={"mean": 4.0}),
            SegmentDefinition(name="s2", distribution_type="uniform", parameters={"min": 0, "max": 2}),
        ],
    )
    return {demo.name: demo, mixed.name: mixed}


class SegmentDialog(tk.Toplevel):
    """Dialog for creating or editing a segment's service time."""

    FIELDS = {
        "poisson": [("Mean", "mean", 2.0)],
        "constant": [("Ticks", "value", 2)],
        "uniform": [("Minimum", "min", 0), ("Maximum", "max", 4)],
        "geometric": [("Mean", "mean", 2.0)],
    }

    def __init__(self, parent: tk.Widget, segment: Optional[SegmentDefinition] = None, default_name: str = "s") -> None:
        super().__init__(parent)
        self.title("Segment settings")
        self.resizable(False, False)
        self.result: Optional[SegmentDefinition] = None
        self.transient(parent)
        self.grab_set()

        self.name_var = tk.StringVar(value=segment.name if segment else default_name)
        self.type_var = tk.StringVar(value=(segment.distribution_type if segment else "poisson").lower())
        self.parameters: Dict[str, tk.StringVar] = {}

        content = ttk.Frame(self, padding=15)
        content.grid(row=0, column=0, sticky="nsew")

        ttk.Label(content, text="Segment id:").grid(row=0, column=0, sticky="w")
        name_entry = ttk.Entry(content, textvariable=self.name_var, width=30)
        name_entry.grid(row=0, column=1, sticky="ew")
        name_entry.focus_set()

        ttk.Label(content, text="Service time:").grid(row=1, column=0, sticky="w")
        combo = ttk.Combobox(content, textvariable=self.type_var, values=sorted(self.FIELDS), state="readonly")
        combo.grid(row=1, column=1, sticky="ew")
        combo.bind("<<ComboboxSelected>>", lambda _event: self._render_parameter_fields())

        self.param_frame = ttk.LabelFrame(content, text="Parameters", padding=(10, 8))
        self.param_frame.grid(row=2, column=0, columnspan=2, sticky="ew", pady=(10, 0))

        button_frame = ttk.Frame(content)
        button_frame.grid(row=3, column=0, columnspan=2, pady=(15, 0))
        ttk.Button(button_frame, text="Cancel", command=self._on_cancel).grid(row=0, column=0, padx=5)
        ttk.Button(button_frame, text="Save", command=self._on_save).grid(row=0, column=1, padx=5)

        self.columnconfigure(0, weight=1)
        content.columnconfigure(1, weight=1)

        self._render_parameter_fields(segment)

    def _render_parameter_fields(self, segment: Optional[SegmentDefinition] = None) -> None:
        for child in self.param_frame.winfo_children():
            child.destroy()
        self.parameters.clear()

        dist_type = self.type_var.get().lower()
        defaults: Dict[str, float] = {}
        if segment and segment.distribution_type.lower() == dist_type:
            defaults = segment.parameters
        for row, (label, key, value) in enumerate(self.FIELDS.get(dist_type, [])):
            ttk.Label(self.param_frame, text=f"{label}:").grid(row=row, column=0, sticky="w", pady=2)
            var = tk.StringVar(value=f"{defaults.get(key, value)}")
            ttk.Entry(self.param_frame, textvariable=var, width=18).grid(row=row, column=1, sticky="ew", pady=2)
            self.parameters[key] = var
        self.param_frame.columnconfigure(1, weight=1)

    def _on_cancel(self) -> None:
        self.result = None
        self.destroy()

    def _on_save(self) -> None:
        name = self.name_var.get().strip()
        if not name:
            messagebox.showerror("Invalid input", "Segment id must not be empty.", parent=self)
            return
        params: Dict[str, float] = {}
        try:
            for key, var in self.parameters.items():
                params[key] = float(var.get())
        except ValueError:
            messagebox.showerror("Invalid input", "Please enter numeric values for distribution parameters.", parent=self)
            return
        definition = SegmentDefinition(name=name, distribution_type=self.type_var.get().lower(), parameters=params)
        try:
            DistributionFactory.from_config(definition.config())
        except ValueError as exc:
            messagebox.showerror("Invalid distribution", str(exc), parent=self)
            return
        self.result = definition
        self.destroy()


class SimulatorGUI:
    """Tkinter based application for configuring lines and estimating completion times."""

    def __init__(self, root: tk.Tk) -> None:
        self.root = root
        self.root.title("Line Completion Time Studio")
        self.root.geometry("1100x750")
        self.root.minsize(900, 650)

        self.lines: List[LineDefinition] = []
        self.selected_line_index: Optional[int] = None
        self.monte_carlo_settings = {
            "items": tk.StringVar(value="a, b"),
            "max_steps": tk.StringVar(value="20"),
            "sims": tk.StringVar(value="1000"),
            "seed": tk.StringVar(value=""),
        }
        self.status_var = tk.StringVar(value="Welcome! Configure your lines to begin.")

        self._simulation_thread: Optional[threading.Thread] = None
        self._simulation_queue: queue.Queue = queue.Queue()

        self.monte_carlo_results: List[MonteCarloResult] = []
        self.monte_carlo_summaries: List[MonteCarloSummary] = []

        self._build_widgets()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------
    def _build_widgets(self) -> None:
        notebook = ttk.Notebook(self.root)
        notebook.pack(fill=tk.BOTH, expand=True)

        self.setup_frame = ttk.Frame(notebook, padding=15)
        self.results_frame = ttk.Frame(notebook, padding=15)
        notebook.add(self.setup_frame, text="Setup")
        notebook.add(self.results_frame, text="Results")

        self._build_setup_tab(self.setup_frame)
        self._build_results_tab(self.results_frame)

        status_bar = ttk.Frame(self.root)
        status_bar.pack(fill=tk.X, side=tk.BOTTOM)
        ttk.Label(status_bar, textvariable=self.status_var, anchor="w", padding=(10, 5)).pack(fill=tk.X)

    def _build_setup_tab(self, parent: ttk.Frame) -> None:
        parent.columnconfigure(1, weight=1)
        parent.rowconfigure(0, weight=1)

        left = ttk.Frame(parent)
        left.grid(row=0, column=0, sticky="nsw", padx=(0, 12))
        ttk.Label(left, text="Lines", font=("Segoe UI", 11, "bold")).pack(anchor="w")

        self.lines_list = tk.Listbox(left, height=20)
        self.lines_list.pack(fill=tk.BOTH, expand=True, pady=(6, 6))
        self.lines_list.bind("<<ListboxSelect>>", lambda _event: self._on_line_selected())

        button_frame = ttk.Frame(left)
        button_frame.pack(fill=tk.X)
        for row, sample_name in enumerate(_build_sample_lines()):
            ttk.Button(
                button_frame, text=f"Add {sample_name}", command=lambda n=sample_name: self._add_sample_line(n)
            ).grid(row=row, column=0, sticky="ew", pady=2)
        ttk.Button(button_frame, text="Remove selected", command=self._remove_selected_line).grid(
            row=len(_build_sample_lines()), column=0, sticky="ew", pady=2
        )
        button_frame.columnconfigure(0, weight=1)

        details = ttk.Frame(parent)
        details.grid(row=0, column=1, sticky="nsew")
        details.columnconfigure(0, weight=1)
        details.rowconfigure(0, weight=1)

        segment_frame = ttk.LabelFrame(details, text="Segments (the ejecting segment is added automatically)", padding=10)
        segment_frame.grid(row=0, column=0, sticky="nsew", pady=(0, 12))
        segment_frame.columnconfigure(0, weight=1)
        segment_frame.rowconfigure(0, weight=1)

        self.segment_tree = ttk.Treeview(segment_frame, columns=("segment", "service"), show="headings", selectmode="browse")
        self.segment_tree.heading("segment", text="Segment")
        self.segment_tree.heading("service", text="Service time")
        self.segment_tree.column("segment", width=160, anchor="w")
        self.segment_tree.column("service", width=300, anchor="w")
        self.segment_tree.grid(row=0, column=0, sticky="nsew")

        actions = ttk.Frame(segment_frame)
        actions.grid(row=1, column=0, sticky="ew", pady=(10, 0))
        ttk.Button(actions, text="Add segment", command=self._add_segment).grid(row=0, column=0, padx=2)
        ttk.Button(actions, text="Edit segment", command=self._edit_segment).grid(row=0, column=1, padx=2)
        ttk.Button(actions, text="Remove segment", command=self._remove_segment).grid(row=0, column=2, padx=2)

        sim_frame = ttk.LabelFrame(details, text="Monte Carlo settings", padding=10)
        sim_frame.grid(row=1, column=0, sticky="ew")
        labels = [("Items:", "items", 18), ("Max ticks:", "max_steps", 8), ("Simulations:", "sims", 8), ("Random seed:", "seed", 8)]
        for col, (label, key, width) in enumerate(labels):
            ttk.Label(sim_frame, text=label).grid(row=0, column=col * 2, sticky="w", padx=(12 if col else 0, 4))
            ttk.Entry(sim_frame, textvariable=self.monte_carlo_settings[key], width=width).grid(
                row=0, column=col * 2 + 1, sticky="w"
            )

        ttk.Button(details, text="Run simulation", command=self._run_simulation).grid(row=2, column=0, sticky="e", pady=(10, 0))

    def _build_results_tab(self, parent: ttk.Frame) -> None:
        parent.columnconfigure(1, weight=1)
        parent.rowconfigure(0, weight=1)

        tree_container = ttk.LabelFrame(parent, text="Line summaries", padding=10)
        tree_container.grid(row=0, column=0, sticky="nsew")
        tree_container.rowconfigure(0, weight=1)
        columns = ("mean", "std", "mode", "completed")
        self.summary_tree = ttk.Treeview(tree_container, columns=columns, show="tree headings", selectmode="browse")
        self.summary_tree.heading("#0", text="Line")
        self.summary_tree.heading("mean", text="Mean ticks")
        self.summary_tree.heading("std", text="σ")
        self.summary_tree.heading("mode", text="Mode")
        self.summary_tree.heading("completed", text="Completed %")
        self.summary_tree.column("#0", width=140)
        for col in columns:
            self.summary_tree.column(col, width=90, anchor="center")
        self.summary_tree.grid(row=0, column=0, sticky="nsew")
        self.summary_tree.bind("<<TreeviewSelect>>", lambda _event: self._refresh_chart())

        chart_frame = ttk.LabelFrame(parent, text="Completion time distribution", padding=10)
        chart_frame.grid(row=0, column=1, sticky="nsew", padx=(12, 0))
        chart_frame.columnconfigure(0, weight=1)
        chart_frame.rowconfigure(0, weight=1)

        self.figure = Figure(figsize=(5.5, 3.8), dpi=100)
        self.distribution_ax = self.figure.add_subplot(111)
        plot_distribution(self.distribution_ax, None)
        self.distribution_canvas = FigureCanvasTkAgg(self.figure, master=chart_frame)
        self.distribution_canvas.get_tk_widget().grid(row=0, column=0, sticky="nsew")

    # ------------------------------------------------------------------
    # Line management helpers
    # ------------------------------------------------------------------
    def _add_sample_line(self, sample_name: str) -> None:
        line = _build_sample_lines()[sample_name]
        cloned = copy.deepcopy(line)
        cloned.name = f"{line.name} {len(self.lines) + 1}"
        self.lines.append(cloned)
        self._refresh_line_list(select=len(self.lines) - 1)
        self.status_var.set(f"Loaded {sample_name}. Adjust as needed before running the simulation.")

    def _remove_selected_line(self) -> None:
        index = self.selected_line_index
        if index is None:
            return
        removed = self.lines.pop(index)
        self.selected_line_index = None
        self._refresh_line_list()
        self.status_var.set(f"Removed {removed.name}.")

    def _refresh_line_list(self, select: Optional[int] = None) -> None:
        self.lines_list.delete(0, tk.END)
        for line in self.lines:
            self.lines_list.insert(tk.END, line.name)
        if not self.lines:
            self.selected_line_index = None
            self._refresh_segment_tree(None)
            return
        index = select if select is not None and 0 <= select < len(self.lines) else 0
        self.lines_list.selection_clear(0, tk.END)
        self.lines_list.selection_set(index)
        self.lines_list.activate(index)
        self._on_line_selected()

    def _on_line_selected(self) -> None:
        selection = self.lines_list.curselection()
        if not selection:
            return
        self.selected_line_index = selection[0]
        self._refresh_segment_tree(self.lines[self.selected_line_index])

    def _refresh_segment_tree(self, line: Optional[LineDefinition]) -> None:
        for row in self.segment_tree.get_children():
            self.segment_tree.delete(row)
        if line is None:
            return
        for idx, segment in enumerate(line.segments):
            self.segment_tree.insert("", tk.END, iid=str(idx), values=(segment.name, segment.describe()))

    def _selected_segment(self) -> Optional[int]:
        selected = self.segment_tree.selection()
        if not selected:
            messagebox.showinfo("Select a segment", "Please choose a segment first.")
            return None
        return int(selected[0])

    def _add_segment(self) -> None:
        if self.selected_line_index is None:
            return
        line = self.lines[self.selected_line_index]
        dialog = SegmentDialog(self.root, default_name=f"s{len(line.segments)}")
        self.root.wait_window(dialog)
        if dialog.result:
            line.segments.append(dialog.result)
            self._refresh_segment_tree(line)
            self.status_var.set(f"Added {dialog.result.name} to {line.name}.")

    def _edit_segment(self) -> None:
        if self.selected_line_index is None:
            return
        index = self._selected_segment()
        if index is None:
            return
        line = self.lines[self.selected_line_index]
        dialog = SegmentDialog(self.root, line.segments[index])
        self.root.wait_window(dialog)
        if dialog.result:
            line.segments[index] = dialog.result
            self._refresh_segment_tree(line)
            self.status_var.set(f"Updated {dialog.result.name}.")

    def _remove_segment(self) -> None:
        if self.selected_line_index is None:
            return
        index = self._selected_segment()
        if index is None:
            return
        line = self.lines[self.selected_line_index]
        removed = line.segments.pop(index)
        self._refresh_segment_tree(line)
        self.status_var.set(f"Removed {removed.name}.")

    # ------------------------------------------------------------------
    # Simulation execution
    # ------------------------------------------------------------------
    def _parse_int(self, value: str, field: str, minimum: int) -> Optional[int]:
        try:
            parsed = int(float(value))
            if parsed < minimum:
                raise ValueError
            return parsed
        except (ValueError, OverflowError):
            messagebox.showerror("Invalid input", f"{field} must be an integer ≥ {minimum}.")
            return None

    def _run_simulation(self) -> None:
        if self._simulation_thread and self._simulation_thread.is_alive():
            return
        if not self.lines:
            messagebox.showinfo("Add a line", "Please add at least one line before running a simulation.")
            return
        items = parse_items(self.monte_carlo_settings["items"].get())
        max_steps = self._parse_int(self.monte_carlo_settings["max_steps"].get(), "Max ticks", 0)
        if max_steps is None:
            return
        sims = self._parse_int(self.monte_carlo_settings["sims"].get(), "Simulations", 1)
        if sims is None:
            return
        seed_text = self.monte_carlo_settings["seed"].get().strip()
        seed = None
        if seed_text:
            try:
                seed = int(seed_text)
            except ValueError:
                messagebox.showerror("Invalid seed", "Random seed must be an integer or left blank.")
                return

        specs = [line.to_spec() for line in self.lines]
        self.status_var.set("Running simulations...")
        self._simulation_queue = queue.Queue()
        self._simulation_thread = threading.Thread(
            target=self._execute_simulation,
            args=(specs, items, max_steps, sims, seed),
            daemon=True,
        )
        self._simulation_thread.start()
        self.root.after(100, self._check_simulation)

    def _execute_simulation(self, specs: List[LineSpec], items: List[str], max_steps: int, sims: int, seed: Optional[int]) -> None:
        results: List[MonteCarloResult] = []
        try:
            for spec in specs:
                results.append(run_monte_carlo(build_line(spec), items, max_steps, sims, base_seed=seed))
        except Exception as exc:  # reported on the Tk thread by _check_simulation
            self._simulation_queue.put(exc)
            return
        self._simulation_queue.put(results)

    def _check_simulation(self) -> None:
        if self._simulation_thread and self._simulation_thread.is_alive():
            self.root.after(100, self._check_simulation)
            return
        try:
            payload = self._simulation_queue.get_nowait()
        except queue.Empty:
            self.root.after(100, self._check_simulation)
            return
        if isinstance(payload, Exception):
            messagebox.showerror("Simulation error", str(payload))
            self.status_var.set("Simulation failed. Adjust your configuration and try again.")
            return
        self.monte_carlo_results = payload
        self.monte_carlo_summaries = summarize_results(self.monte_carlo_results)
        self._refresh_results_tab()
        self.status_var.set("Simulation complete. Review the results tab for the duration distribution.")

    # ------------------------------------------------------------------
    # Results presentation
    # ------------------------------------------------------------------
    def _refresh_results_tab(self) -> None:
        for row in self.summary_tree.get_children():
            self.summary_tree.delete(row)
        for idx, summary in enumerate(self.monte_carlo_summaries):
            self.summary_tree.insert(
                "",
                tk.END,
                iid=str(idx),
                text=summary.line_name,
                values=(
                    f"{summary.mean_duration:.2f}",
                    f"{summary.std_duration:.2f}",
                    summary.mode_duration,
                    f"{summary.completion_rate * 100:.1f}",
                ),
            )
        if self.monte_carlo_summaries:
            self.summary_tree.selection_set("0")
        self._refresh_chart()

    def _refresh_chart(self) -> None:
        selected = self.summary_tree.selection()
        summary = self.monte_carlo_summaries[int(selected[0])] if selected else None
        plot_distribution(self.distribution_ax, summary)
        self.distribution_canvas.draw_idle()


def launch() -> None:
    root = tk.Tk()
    SimulatorGUI(root)
    root.mainloop()


if __name__ == "__main__":  # pragma: no cover - manual execution
    launch()
