"""Command-line interface for the business relationship mapper."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .analyzer import AnalysisResult, RelationshipAnalyzer, new_businesses_since, sample_businesses
from .config import AnalyzerConfig
from .csv_parser import parse_businesses_csv
from .exceptions import ConfigError, InputError, PersistenceError
from .formatters import format_type_label, truncate_text
from .graph_builder import (
    GraphFilter,
    build_graph_data,
    filter_graph_by_node,
    get_network_stats,
    get_unique_industries,
    search_businesses,
)
from .llm_client import LLMClient
from .store import RelationshipStore
from .text_sanitizer import remove_emojis, sanitize_for_display

app = typer.Typer(
    name="relationship-mapper",
    help="Discover business partnership relationships from CSV profiles"
)
console = Console()

FATAL_ERRORS = (ConfigError, InputError, PersistenceError)

# rough per-pair token usage and gpt-4o-mini prices (USD per 1M tokens)
TOKENS_PER_PAIR = 700
INPUT_PRICE = 0.15
OUTPUT_PRICE = 0.60


def setup_logging(level: str = 'INFO'):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def build_client(config: AnalyzerConfig) -> LLMClient:
    return LLMClient(config)


def _fail(message: str):
    console.print(f"\n[bold red]❌ Error:[/bold red] {message}")
    raise typer.Exit(code=1)


def _load_config() -> AnalyzerConfig:
    try:
        config = AnalyzerConfig.from_env()
    except ConfigError as e:
        console.print(f"\n[bold red]❌ Error:[/bold red] {e}")
        console.print("\n📝 Setup Instructions:")
        console.print("   1. Create a .env file with your API key (OPENAI_API_KEY=...)")
        console.print("   2. Or export it in your shell before running this command")
        raise typer.Exit(code=1)
    setup_logging(config.log_level)
    return config


def _print_config(config: AnalyzerConfig):
    console.print("\n⚙️  Configuration:")
    console.print(f"   Provider: {config.provider}")
    console.print(f"   Model: {config.model}")
    console.print(f"   Temperature: {config.temperature}")
    console.print(f"   Max Tokens: {config.max_tokens}")
    console.print(f"   Max Retries: {config.max_retries}")
    console.print(f"   Rate Limit Delay: {config.rate_limit_delay_ms}ms")


def _print_type_breakdown(breakdown: dict, title: str = "Relationship Types"):
    if not breakdown:
        return
    table = Table(title=title)
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")
    for rel_type, count in sorted(breakdown.items()):
        table.add_row(format_type_label(rel_type), str(count))
    console.print(table)


def _print_run_summary(result: AnalysisResult):
    console.print(f"✅ Pairs evaluated: {result.pairs_total}")
    console.print(f"✅ Pairs succeeded: {result.pairs_succeeded}")
    if result.pairs_failed:
        console.print(f"[yellow]⚠️  Pairs failed: {result.pairs_failed}[/yellow]")
    if result.self_edges_dropped:
        console.print(f"[yellow]⚠️  Self-relationships dropped: {result.self_edges_dropped}[/yellow]")
    console.print(f"✅ Relationships found: {len(result.relationships)}")
    console.print(f"✅ Duration: {result.duration:.2f}s")
    console.print(f"✅ Avg confidence: {result.avg_confidence:.1f}%")


def _display(text: str) -> str:
    return remove_emojis(sanitize_for_display(text))


def _resolve_paths(config_dir: str, data_dir: Optional[Path], csv: Optional[Path]):
    data_dir = data_dir or Path(config_dir)
    csv = csv or data_dir / 'businesses.csv'
    return data_dir, csv


@app.command()
def analyze(
    csv: Optional[Path] = typer.Option(
        None,
        "--csv", "-c",
        help="Businesses CSV file (default: <data-dir>/businesses.csv)"
    ),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir", "-d",
        help="Directory for businesses.json and relationships.json"
    ),
    sample: Optional[int] = typer.Option(
        None,
        "--sample",
        min=2,
        help="Only analyze the first N businesses"
    ),
):
    """Run a full analysis over every pair of businesses."""
    config = _load_config()
    data_dir, csv = _resolve_paths(config.data_dir, data_dir, csv)

    console.print("[bold green]🚀 Business Relationship Analyzer[/bold green]")
    _print_config(config)

    try:
        store = RelationshipStore(data_dir)

        console.print("\n📊 Step 1: Parsing business data...")
        businesses = parse_businesses_csv(csv)
        store.save_businesses(businesses)
        console.print(f"   ✅ Parsed {len(businesses)} businesses")

        to_analyze = sample_businesses(businesses, sample)
        if sample:
            console.print(f"\n🔬 Running in SAMPLE mode: analyzing {len(to_analyze)} businesses")

        total = len(to_analyze) * (len(to_analyze) - 1) // 2
        console.print("\n🤖 Step 2: Analyzing relationships with AI...")
        console.print(f"Total pairs to analyze: {total}")

        analyzer = RelationshipAnalyzer(
            build_client(config),
            rate_limit_delay=config.rate_limit_delay,
            console=console,
        )
        result = analyzer.analyze_all(to_analyze)

        console.print("\n💾 Step 3: Saving results...")
        store.save_relationships(result.relationships)
    except FATAL_ERRORS as e:
        _fail(str(e))

    console.print("\n" + "=" * 50)
    console.print("[bold]📈 Analysis Complete![/bold]\n")
    console.print(f"✅ Businesses analyzed: {len(to_analyze)}")
    _print_run_summary(result)
    _print_type_breakdown(result.type_breakdown)

    console.print("\n✨ Data saved to:")
    console.print(f"   {store.businesses_path}")
    console.print(f"   {store.relationships_path}")


@app.command()
def incremental(
    csv: Optional[Path] = typer.Option(
        None,
        "--csv", "-c",
        help="Businesses CSV file (default: <data-dir>/businesses.csv)"
    ),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir", "-d",
        help="Directory holding the existing analysis"
    ),
):
    """Analyze only new businesses against the existing ones and merge the results."""
    config = _load_config()
    data_dir, csv = _resolve_paths(config.data_dir, data_dir, csv)

    console.print("[bold green]🔄 Business Relationship Analyzer (INCREMENTAL MODE)[/bold green]")

    store = RelationshipStore(data_dir)
    if not store.exists():
        _fail(f"Existing data not found in {data_dir}. Run a full analysis first: relationship-mapper analyze")

    try:
        console.print("\n📂 Step 1: Loading existing data...")
        existing = store.load_businesses()
        existing_relationships = store.load_relationships()
        console.print(f"   ✅ Loaded {len(existing)} existing businesses")
        console.print(f"   ✅ Loaded {len(existing_relationships)} existing relationships")

        console.print("\n📊 Step 2: Checking for new businesses...")
        businesses = parse_businesses_csv(csv)
        new = new_businesses_since(businesses, existing)

        if not new:
            console.print("\n✅ No new businesses found. All businesses are up to date!")
            return

        console.print(f"\n🆕 Found {len(new)} new business(es) to analyze:")
        for i, biz in enumerate(new, 1):
            console.print(f"   {i}. {biz.name} ({biz.industry})", markup=False)

        console.print("\n🤖 Step 3: Analyzing new businesses...")
        console.print(f"Total pairs to analyze: {len(new) * len(existing)}")
        analyzer = RelationshipAnalyzer(
            build_client(config),
            rate_limit_delay=config.rate_limit_delay,
            console=console,
        )
        result = analyzer.analyze_all(businesses, existing=existing)

        console.print("\n💾 Step 4: Merging and saving results...")
        all_businesses, all_relationships = store.merge(result.new_businesses, result.relationships)
    except FATAL_ERRORS as e:
        _fail(str(e))

    console.print("\n" + "=" * 50)
    console.print("[bold]📈 Incremental Analysis Complete![/bold]\n")
    console.print(f"✅ New businesses added: {len(result.new_businesses)}")
    _print_run_summary(result)
    console.print(f"✅ Total businesses: {len(all_businesses)}")
    console.print(f"✅ Total relationships: {len(all_relationships)}")
    _print_type_breakdown(result.type_breakdown, "New Relationship Types")

    tokens = result.pairs_total * TOKENS_PER_PAIR
    cost = tokens / 1_000_000 * INPUT_PRICE + tokens / 1_000_000 * OUTPUT_PRICE
    console.print("\n💰 Estimated Cost:")
    console.print(f"   API Calls: {result.pairs_total}")
    console.print(f"   Est. Input Tokens: {tokens:,}")
    console.print(f"   Est. Output Tokens: {tokens:,}")
    console.print(f"   Est. Total Cost: ${cost:.4f}")


def _load_data(data_dir: Path):
    store = RelationshipStore(data_dir)
    try:
        return store.load_businesses(), store.load_relationships()
    except InputError as e:
        _fail(str(e))


@app.command()
def stats(
    data_dir: Path = typer.Option("data", "--data-dir", "-d", help="Directory holding the analysis"),
    min_confidence: int = typer.Option(0, "--min-confidence", min=0, max=100),
):
    """Show network statistics for the stored analysis."""
    businesses, relationships = _load_data(data_dir)
    relationships = [r for r in relationships if r.confidence >= min_confidence]
    network = get_network_stats(businesses, relationships)

    table = Table(title="Network Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Businesses", str(network.total_businesses))
    table.add_row("Relationships", str(network.total_relationships))
    table.add_row("Connected businesses", str(network.connected_businesses))
    table.add_row("Avg connections", str(network.avg_connections))
    table.add_row("Avg confidence", f"{network.avg_confidence}%")
    console.print(table)

    if network.most_connected:
        top = Table(title="Most Connected")
        top.add_column("#", justify="right")
        top.add_column("Business")
        top.add_column("Industry")
        top.add_column("Connections", justify="right")
        for i, item in enumerate(network.most_connected, 1):
            biz = item['business']
            top.add_row(str(i), _display(biz.name), biz.industry, str(item['connections']))
        console.print(top)

    _print_type_breakdown(network.type_breakdown)

    industries = get_unique_industries(businesses)
    if industries:
        console.print(f"\n🏷️  Industries ({len(industries)}): {', '.join(industries)}")


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to match against name, description or industry"),
    data_dir: Path = typer.Option("data", "--data-dir", "-d", help="Directory holding the analysis"),
):
    """Find businesses by name, description or industry."""
    businesses, _ = _load_data(data_dir)
    matches = search_businesses(businesses, query)

    if not matches:
        console.print(f"No businesses match '{query}'", markup=False)
        return

    table = Table(title=f"Businesses matching '{query}'")
    table.add_column("ID", style="dim")
    table.add_column("Business", style="cyan")
    table.add_column("Industry")
    table.add_column("Description")
    for biz in matches:
        table.add_row(biz.id, _display(biz.name), biz.industry, truncate_text(_display(biz.description), 60))
    console.print(table)


@app.command()
def graph(
    data_dir: Path = typer.Option("data", "--data-dir", "-d", help="Directory holding the analysis"),
    min_confidence: int = typer.Option(50, "--min-confidence", min=0, max=100),
    types: Optional[List[str]] = typer.Option(None, "--type", "-t", help="Relationship type to keep (repeatable)"),
    industries: Optional[List[str]] = typer.Option(None, "--industry", "-i", help="Industry to keep (repeatable)"),
    focus: Optional[str] = typer.Option(None, "--focus", help="Only show this business id and its neighbors"),
    output: Path = typer.Option("output/graph.json", "--output", "-o", help="Graph JSON output file"),
    png: Optional[Path] = typer.Option(None, "--png", help="Also render the graph to this PNG file"),
):
    """Export the filtered relationship graph as {nodes, links} JSON."""
    businesses, relationships = _load_data(data_dir)

    filters = GraphFilter(
        min_confidence=min_confidence,
        selected_types=types or (),
        selected_industries=industries or (),
    )
    graph_data = filter_graph_by_node(build_graph_data(businesses, relationships, filters), focus)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(graph_data.to_dict(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        _fail(f"Could not write {output}: {e}")

    console.print(f"[bold green]✓[/bold green] {len(graph_data.nodes)} nodes, {len(graph_data.links)} links")
    console.print(f"  ✓ Saved to {output}")

    if png:
        from .visualize import render_network
        render_network(graph_data, str(png))
        console.print(f"  ✓ Rendered to {png}")


@app.command()
def report(
    data_dir: Path = typer.Option("data", "--data-dir", "-d", help="Directory holding the analysis"),
    output: Path = typer.Option("output/relationship_report.pdf", "--output", "-o", help="PDF output file"),
    min_confidence: int = typer.Option(50, "--min-confidence", min=0, max=100),
):
    """Generate a PDF relationship report."""
    businesses, relationships = _load_data(data_dir)

    from .report import generate_report
    path = generate_report(businesses, relationships, str(output), GraphFilter(min_confidence=min_confidence))
    console.print(f"[bold green]📄 Report saved to:[/bold green] {path}")


@app.command()
def version():
    """Show version information."""
    from . import __version__
    console.print(f"[bold]Business Relationship Mapper[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
