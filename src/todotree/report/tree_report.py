"""Tree rendering of grouped TODO annotations."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from todotree.scanner.models import NO_TAG
from todotree.utils.path_utils import get_relative_path

if TYPE_CHECKING:
	from todotree.scanner.models import AggregatedTree, GroupKey, Todo

NO_TODOS_MESSAGE = "✅ No TODOs found in the repository."

TAG_ICON = "🏷️"
AUTHOR_ICON = "👤"


def todo_label(todo: Todo, workdir: Path, cwd: Path | None = None) -> Text:
	"""
	Leaf label: ``path:line - <highlighted line>``.

	The path is relative to ``cwd`` when the file is below it, absolute otherwise.
	"""
	path = get_relative_path(workdir / todo.path, cwd or Path.cwd())
	label = Text(f"{path.as_posix()}:{todo.line} - ")
	label.append_text(todo.display if todo.display is not None else Text(todo.message))
	return label


def build_group_tree(
	key: GroupKey, tags: dict[str, dict[str, list[Todo]]], workdir: Path, cwd: Path | None = None
) -> Tree:
	"""
	Build the tree for one commit group.

	Named tags get their own node; annotations without a tag hang their
	author nodes directly off the group.
	"""
	tree = Tree(Text(key.label, style="bold"))
	for tag, authors in tags.items():
		parent = tree if tag == NO_TAG else tree.add(Text(f"{TAG_ICON} {tag}", style="cyan"))
		for author, todos in authors.items():
			author_node = parent.add(Text(f"{AUTHOR_ICON} {author}", style="green"))
			for todo in todos:
				author_node.add(todo_label(todo, workdir, cwd))
	return tree


def render_report(
	grouped: AggregatedTree, workdir: Path, console: Console | None = None, cwd: Path | None = None
) -> None:
	"""
	Print one tree per commit group, in the grouping's order.

	Args:
		grouped: Output of the aggregator.
		workdir: Repository working directory the annotation paths are relative to.
		console: Console to print on; stdout by default.
		cwd: Directory paths are shown relative to; the current directory by default.
	"""
	console = console or Console()
	if not grouped:
		console.print(NO_TODOS_MESSAGE)
		return

	for key, tags in grouped.items():
		console.print(build_group_tree(key, tags, workdir, cwd))
		console.print()
