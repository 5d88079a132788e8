"""
Console Reporter Adapter

Colored terminal output for simulation reports.
"""

from typing import Any, Dict, List


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    HEADER = "\033[95m"


class ConsoleReporter:
    """Formatted terminal output with colors and tables."""

    def __init__(self, use_color: bool = True):
        self.use_color = use_color

    def _color(self, text: str, color: str) -> str:
        if self.use_color:
            return f"{color}{text}{Colors.RESET}"
        return text

    def info(self, message: str) -> None:
        print(f"  {message}")

    def success(self, message: str) -> None:
        print(self._color(f"✓ {message}", Colors.GREEN))

    def warning(self, message: str) -> None:
        print(self._color(f"! {message}", Colors.YELLOW))

    def error(self, message: str) -> None:
        print(self._color(f"✗ {message}", Colors.RED))

    def section(self, title: str) -> None:
        line = "=" * (len(title) + 4)
        print()
        print(self._color(line, Colors.HEADER))
        print(self._color(f"  {title}  ", Colors.HEADER + Colors.BOLD))
        print(self._color(line, Colors.HEADER))

    def table(self, headers: List[str], rows: List[List[Any]]) -> None:
        if not headers or not rows:
            return
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[:len(widths)]):
                widths[i] = max(widths[i], len(str(cell)))

        header_line = " | ".join(str(h).ljust(widths[i]) for i, h in enumerate(headers))
        print(self._color(header_line, Colors.BOLD))
        print("-" * len(header_line))
        for row in rows:
            print(" | ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row[:len(widths)])))

    def utilization_color(self, value: float) -> str:
        if value > 0.8:
            return Colors.RED
        if value > 0.5:
            return Colors.YELLOW
        return Colors.GREEN

    def report(self, report: Dict[str, Any]) -> None:
        """Print a simulation report produced by ``SimulationReport.to_dict()``."""
        summary = report["summary"]
        self.section("Simulation Summary")
        self.info(f"Simulated time:   {summary['elapsed_time'] / 1000:.1f}s ({summary['ticks']} ticks)")
        self.info(f"Total requests:   {summary['total_requests']}")
        self.info(f"Completed:        {summary['completed_count']}")
        self.info(f"Failed:           {summary['failed_count']}")
        self.info(f"Active:           {summary['active_request_count']}")

        rate = summary["success_rate"]
        color = Colors.GREEN if rate >= 95 else Colors.YELLOW if rate >= 80 else Colors.RED
        print(f"  Success rate:     {self._color(f'{rate:.1f}%', color)}")
        self.info(f"Avg response:     {summary['average_response_time']:.1f} ms")
        self.info(f"Avg request size: {summary['average_request_size']:.2f} KB")

        latency = report.get("latency", {})
        if latency:
            self.section("Response Time (ms)")
            self.table(
                ["min", "p50", "p90", "p99", "max"],
                [[f"{latency.get(k, 0):.1f}" for k in ("min", "p50", "p90", "p99", "max")]],
            )

        bottlenecks = report.get("bottlenecks", [])
        self.section("Bottlenecks")
        if bottlenecks:
            rows = []
            for b in bottlenecks:
                value = self._color(f"{b['utilization'] * 100:.1f}%", self.utilization_color(b["utilization"]))
                rows.append([b["kind"], b["name"], value])
            self.table(["Kind", "Component", "Utilization"], rows)
        else:
            self.success("No component above the utilization threshold")

        errors = report.get("errors", {})
        self.section("Errors")
        if errors.get("total_errors"):
            self.table(["Reason", "Count"], [[e["reason"], e["count"]] for e in errors["by_reason"]])
            print()
            self.table(["Node", "Count"], [[e["node_name"], e["count"]] for e in errors["by_node"]])
        else:
            self.success("No failed requests")
