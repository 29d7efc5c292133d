"""
Demo data seeding script for parse-resource.

Creates blog posts with comments on the configured backend through the ORM,
using deterministic pseudo-random content so repeated runs with the same
seed produce the same data.
"""

from __future__ import annotations

import random
import sys
import time
from typing import List, Tuple

import typer

from parse_resource import Field, Record, belongs_to, has_many
from parse_resource.config import get_settings
from parse_resource.utils.logging import configure_logging

app = typer.Typer(help="Seed demo BlogPost/BlogComment records through the ORM.")

WORDS = [
    "alpha", "backend", "cloud", "delta", "event", "field", "graph", "hook",
    "index", "json", "key", "lookup", "model", "node", "object", "pointer",
    "query", "record", "schema", "token",
]


class BlogPost(Record):
    title = Field()
    body = Field()
    score = Field()
    comments = has_many("BlogComment", foreign_key="post")


class BlogComment(Record):
    text = Field()
    post = belongs_to("BlogPost")


SeedPlan = List[Tuple[BlogPost, List[BlogComment]]]


def _sentence(rng: random.Random, words: int) -> str:
    return " ".join(rng.choice(WORDS) for _ in range(words)).capitalize() + "."


def build_posts(rng: random.Random, posts: int, comments: int) -> SeedPlan:
    """
    Build unsaved posts and their comments; no request is made.

    Parameters
    ----------
    rng : random.Random
        Seeded generator for the content.
    posts : int
        Number of posts.
    comments : int
        Number of comments per post.
    """
    plan: SeedPlan = []
    for index in range(posts):
        post = BlogPost(
            title=f"Post {index + 1}: {_sentence(rng, 3)}",
            body=" ".join(_sentence(rng, 8) for _ in range(3)),
            score=rng.randint(0, 100),
        )
        children = [BlogComment(text=_sentence(rng, 6)) for _ in range(comments)]
        plan.append((post, children))
    return plan


def seed(plan: SeedPlan) -> int:
    """Persist every post, then append its comments. Returns the number of records written."""
    written = 0
    for post, children in plan:
        if not post.save():
            raise typer.BadParameter(f"Post rejected: {post.errors.full_messages()}")
        written += 1
        collection = post.comments
        collection.extend(children)
        written += len(children)
    return written


@app.command()
def main(
    posts: int = typer.Option(
        5,
        "--posts",
        "-p",
        min=0,
        help="Number of posts to create.",
    ),
    comments: int = typer.Option(
        3,
        "--comments",
        "-c",
        min=0,
        help="Number of comments per post.",
    ),
    seed_value: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Only build the records; do not send anything.",
    ),
) -> None:
    """
    Create demo posts with comments on the configured backend.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    plan = build_posts(random.Random(seed_value), posts, comments)
    total = sum(1 + len(children) for _, children in plan)
    if dry_run:
        typer.echo(f"Dry run: would create {total} records ({posts} posts x {comments} comments).")
        return

    start = time.perf_counter()
    typer.echo(f"Seeding {posts} posts with {comments} comments each -> {settings.base_url}")
    written = seed(plan)
    duration = time.perf_counter() - start
    typer.echo(f"Created {written} records in {duration:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
