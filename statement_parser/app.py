#!/usr/bin/env python3
"""
CLI interface for the credit card statement parser.
"""
import json
import logging
import typer
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .core.runner import parse as parse_text
from .core.detectors import detect_bank
from .core.loader import load_text, TextExtractionError

app = typer.Typer(help="Credit Card Statement Parser")
console = Console()


def _result_json(result, bank: Optional[str]) -> str:
    payload = {"bankSelected": bank}
    payload.update(result.model_dump(mode="json", by_alias=True))
    return json.dumps(payload, indent=2)


@app.command()
def parse(
    file_path: Path = typer.Argument(..., help="Path to a statement PDF or text file"),
    bank: Optional[str] = typer.Option(None, "--bank", "-b", help="Preferred bank (axis, hdfc, sbi, icici, amex)"),
    output: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON file path"),
    text_out: Optional[Path] = typer.Option(None, "--text-out", help="Write the extracted text here"),
    lang: str = typer.Option("eng", "--lang", help="OCR language for scanned PDFs"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Parse a credit card statement into structured JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not file_path.exists():
        console.print(f"[red]Error: file not found: {file_path}[/red]")
        raise typer.Exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True
        ) as progress:
            task = progress.add_task("Extracting text...", total=None)
            text = load_text(file_path, lang=lang)

            if text_out:
                text_out.write_text(text, encoding="utf-8")

            progress.update(task, description="Parsing statement...")
            result = parse_text(text, bank_hint=bank)

        data = _result_json(result, bank)
        if output:
            output.write_text(data, encoding="utf-8")
            console.print(f"[green]✓ Parsed with {result.bank_used} profile. Output written to: {output}[/green]")
        else:
            console.print_json(data)

    except TextExtractionError as e:
        console.print(f"[red]Error extracting text: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def detect(
    file_path: Path = typer.Argument(..., help="Path to a statement PDF or text file")
):
    """Detect which bank issued a statement."""
    try:
        text = load_text(file_path)
    except TextExtractionError as e:
        console.print(f"[red]Error extracting text: {e}[/red]")
        raise typer.Exit(1)

    bank, score, scores = detect_bank(text)

    table = Table(title="Detection scores")
    table.add_column("Bank")
    table.add_column("Score", justify="right")
    for name, value in scores.items():
        table.add_row(name, str(value))
    console.print(table)

    if score:
        console.print(f"[green]Detected bank: {bank} (score {score})[/green]")
    else:
        console.print(f"[yellow]No issuer keywords found, defaulting to {bank}[/yellow]")


@app.command()
def batch(
    input_dir: Path = typer.Argument(..., help="Directory of statement PDFs"),
    output_dir: Path = typer.Argument(..., help="Directory for extracted text and parsed JSON"),
    bank: Optional[str] = typer.Option(None, "--bank", "-b", help="Preferred bank for every file"),
    lang: str = typer.Option("eng", "--lang", help="OCR language for scanned PDFs")
):
    """Extract and parse every PDF in a directory."""
    if not input_dir.is_dir():
        console.print(f"[red]Error: not a directory: {input_dir}[/red]")
        raise typer.Exit(1)

    parsed_dir = output_dir / "parsed"
    parsed_dir.mkdir(parents=True, exist_ok=True)

    pdfs = sorted(p for p in input_dir.iterdir() if p.suffix.lower() == ".pdf")
    if not pdfs:
        console.print(f"[yellow]No PDF files found in {input_dir}[/yellow]")
        return

    failures = 0
    for pdf_path in pdfs:
        try:
            text = load_text(pdf_path, lang=lang)
        except TextExtractionError as e:
            failures += 1
            console.print(f"[red]✗ {pdf_path.name}: {e}[/red]")
            continue

        (output_dir / f"{pdf_path.stem}.txt").write_text(text, encoding="utf-8")
        result = parse_text(text, bank_hint=bank)
        (parsed_dir / f"{pdf_path.stem}.json").write_text(_result_json(result, bank), encoding="utf-8")
        console.print(f"[green]✓ {pdf_path.name}[/green] -> {result.bank_used}")

    console.print(f"Processed {len(pdfs) - failures}/{len(pdfs)} files")


if __name__ == "__main__":
    app()
