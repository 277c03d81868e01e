"""glissue entry point.

Run inside (or below) a git working directory whose origin is a GitLab
project: pick a template, write the issue in your editor, then pick a
milestone and labels for it. Usage: glissue
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from glissue import __version__
from glissue.adapters import GitLabAdapter, GitPlatformError
from glissue.config import AppConfig, ConfigError, load_config
from glissue.logging import GlissueLogging
from glissue.models import IssueLabel, IssueMilestone
from glissue.selector import SelectionAborted, find, find_multi
from glissue.services.editor import EditorError, IssueContentError, run_editor_session
from glissue.services.git import (
    GitRunnerError,
    OriginURLError,
    RemoteNotFoundError,
    RepositoryNotFoundError,
    find_repo,
)
from glissue.services.issues import (
    ProjectNotFoundError,
    create_issue,
    find_project,
    list_labels,
    list_milestones,
    set_issue_labels_milestones,
)
from glissue.services.templates import TemplateError, list_issue_templates

log = logging.getLogger("glissue")

NO_MILESTONE = "No milestone"
NO_LABELS = "No labels"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="glissue",
        description="Create a GitLab issue for the current repository from a template",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv if argv is not None else sys.argv[1:])


def _label_display(label: IssueLabel) -> str:
    if label.description:
        return f"{label.name}: {label.description}"
    return label.name


def select_milestone(milestones: List[IssueMilestone]) -> IssueMilestone | None:
    """Ask for one milestone; None if there are none, the user picks "No
    milestone", or aborts."""
    if not milestones:
        log.info("No issue milestones present")
        return None
    options: List[IssueMilestone | None] = [None, *milestones]

    def display(i: int) -> str:
        milestone = options[i]
        return milestone.name if milestone is not None else NO_MILESTONE

    try:
        idx = find(options, display, prompt="milestone> ")
    except SelectionAborted:
        return None
    return options[idx]


def select_labels(labels: List[IssueLabel]) -> List[IssueLabel]:
    """Ask for any number of labels; [] if there are none, the user picks
    "No labels", or aborts."""
    if not labels:
        log.info("No issue labels present")
        return []
    options: List[IssueLabel | None] = [None, *labels]

    def display(i: int) -> str:
        label = options[i]
        return _label_display(label) if label is not None else NO_LABELS

    try:
        chosen = find_multi(options, display, prompt="labels> ")
    except SelectionAborted:
        return []
    return [label for label in (options[i] for i in chosen) if label is not None]


def run(config: AppConfig, cwd: Path) -> int:
    """Run the whole pipeline; return the process exit code."""
    try:
        repo = find_repo(cwd)
    except RepositoryNotFoundError as e:
        log.error("Error finding git repo in working directory: %s", e)
        return 1

    try:
        origin = repo.origin_remote()
    except (RemoteNotFoundError, OriginURLError, GitRunnerError) as e:
        log.error("Error getting remote origin: %s", e)
        return 1
    log.info("Origin URL: %s", origin.url)

    adapter = GitLabAdapter(
        token=config.gitlab_token_resolved,
        api_url=config.gitlab.api_url or origin.api_url,
        timeout=config.gitlab.timeout,
        per_page=config.gitlab.per_page,
    )
    try:
        project = find_project(adapter, origin.project_path)
    except (ProjectNotFoundError, GitPlatformError) as e:
        log.error("Failed to get project from origin URL: %s", e)
        return 1
    log.info("Found project: %s", project.http_url_to_repo or project.web_url)

    try:
        templates = list_issue_templates(
            adapter,
            project,
            local_dir=config.templates.local_dir_resolved,
            remote_path=config.templates.remote_path,
        )
    except TemplateError as e:
        log.error("Failed to get issue templates for project: %s", e)
        return 1
    labels = list_labels(adapter, project)
    milestones = list_milestones(adapter, project)

    try:
        idx = find(templates, lambda i: templates[i].name, prompt="template> ")
    except SelectionAborted:
        log.error("Failed to select template: selection aborted")
        return 1
    template = templates[idx]
    log.info("Selected template: %s", template.name)

    try:
        edited = run_editor_session(repo, project, template)
        issue = create_issue(adapter, project, edited)
    except (EditorError, IssueContentError, GitPlatformError) as e:
        log.error("Could not create issue: %s", e)
        return 1
    log.info("Created: %s", issue.web_url)

    milestone = select_milestone(milestones)
    chosen_labels = select_labels(labels)
    if milestone is None and not chosen_labels:
        log.info("No labels or milestone selected")
        return 0
    try:
        set_issue_labels_milestones(adapter, project, issue, chosen_labels, milestone)
    except GitPlatformError as e:
        log.error("Could not set labels/milestone on %s: %s", issue.web_url, e)
        return 1
    if milestone is not None:
        log.info("Milestone: %s", milestone.name)
    if chosen_labels:
        log.info("Labels: %s", ", ".join(label.name for label in chosen_labels))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: load config, set up logging, run."""
    parse_args(argv)
    try:
        config = load_config()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        log.error("Failed to load config: %s", e)
        return 1
    GlissueLogging(config.logging).setup()

    try:
        return run(config, Path.cwd())
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
