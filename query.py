#!/usr/bin/env python3
"""Ad hoc query runner for the pantry recipe service.

Runs the analysis and suggestion pipeline directly, without starting the API server.

Usage:
    python query.py --image images/fridge.jpg
    python query.py --image a.jpg --image b.png --diet vegan --cuisine italian,thai
    python query.py --ingredients eggs,milk,bread,butter --count 3
    python query.py --debug --ingredients tomatoes,onions  # Show full JSON response

Features:
- Images are read from disk and sent as data URLs (same path as the API)
- Ingredients can be given directly instead of images
- Ranked recipes rendered as rich tables and markdown
- Debug mode to display the full JSON result
"""

import argparse
import asyncio
import base64
import sys
from pathlib import Path

import filetype
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from src.models.models import RecipeSuggestions, UserPreferences
from src.services.ingredients import analyze_images
from src.services.recipes import suggest_recipes
from src.utils.logger import logger

console = Console()


def load_image_as_data_url(image_path: str) -> str:
    """Read an image file and encode it as a data URL."""
    image_file = Path(image_path)
    if not image_file.exists():
        console.print(f"[red]✗ Error: Image file not found: {image_path}[/red]")
        sys.exit(1)

    image_bytes = image_file.read_bytes()
    kind = filetype.guess(image_bytes)
    mime_type = kind.mime if kind else "image/jpeg"
    image_data = base64.b64encode(image_bytes).decode("utf-8")

    logger.info(f"✓ Loaded image: {image_file.name} ({len(image_data) / 1024:.1f} KB base64)")
    return f"data:{mime_type};base64,{image_data}"


def render_suggestions(suggestions: RecipeSuggestions) -> None:
    """Print ranked recipes: summary table first, then each recipe as markdown."""
    if suggestions.message:
        console.print(f"[yellow]{suggestions.message}[/yellow]")

    if not suggestions.recipes:
        return

    table = Table(title=f"Recipes ({suggestions.source}, max missing: {suggestions.threshold})")
    table.add_column("#", justify="right")
    table.add_column("Title", style="bold")
    table.add_column("Missing", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Difficulty")
    for idx, recipe in enumerate(suggestions.recipes, 1):
        table.add_row(
            str(idx),
            recipe.title + (" (saved)" if recipe.is_saved else ""),
            str(recipe.missing_count),
            f"{recipe.prep_time + recipe.cook_time} min",
            recipe.difficulty,
        )
    console.print(table)

    for recipe in suggestions.recipes:
        lines = [f"## {recipe.title}", "", recipe.description, ""]
        if recipe.missing_ingredients:
            lines.append(f"**Missing:** {', '.join(recipe.missing_ingredients)}")
            lines.append("")
        lines.append("### Ingredients")
        lines.extend(f"- {item}" for item in recipe.ingredients)
        lines.append("")
        lines.append("### Instructions")
        lines.extend(f"{step_no}. {step}" for step_no, step in enumerate(recipe.instructions, 1))
        console.print(Markdown("\n".join(lines)))
        console.print()


async def run_query(args: argparse.Namespace) -> RecipeSuggestions:
    """Analyze images (or take ingredients as given), then suggest recipes."""
    if args.image:
        image_urls = [load_image_as_data_url(path) for path in args.image]
        analysis = await analyze_images(image_urls, args.diet)
        ingredients = analysis.ingredients
        console.print(f"[bold cyan]Detected ingredients:[/bold cyan] {', '.join(ingredients)}")
    else:
        ingredients = [item.strip().lower() for item in args.ingredients.split(",") if item.strip()]

    preferences = UserPreferences(
        dietary_preferences=args.diet,
        food_genres=[item.strip() for item in (args.cuisine or "").split(",") if item.strip()],
    )
    return await suggest_recipes(ingredients, preferences, args.count)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Suggest recipes from pantry photos or an ingredient list.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", action="append", metavar="PATH", help="Pantry photo (repeatable)")
    source.add_argument("--ingredients", metavar="A,B,...", help="Comma-separated ingredient list")
    parser.add_argument("--diet", help='Dietary restrictions, e.g. "vegan, gluten-free"')
    parser.add_argument("--cuisine", help="Comma-separated preferred cuisines")
    parser.add_argument("--count", type=int, help="Number of recipes to generate")
    parser.add_argument("--debug", action="store_true", help="Print the full JSON result")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args(sys.argv[1:])

    try:
        suggestions = asyncio.run(run_query(args))
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)

    console.print()
    if args.debug:
        console.print("[bold cyan]Debug Mode: Full Response[/bold cyan]")
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print_json(data=suggestions.model_dump(mode="json"))
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print()

    render_suggestions(suggestions)
