"""Render command results into deterministic pull request comments."""

from __future__ import annotations

from atlantis_bot.models.command_models import (
    CommandName,
    CommandResult,
    ProjectResult,
    ResultStatus,
)


HELP_COMMENT = """```cmake
atlantis
Terraform automation and collaboration for your team

Usage:
  atlantis <command> [options] -- [terraform options]

Examples:
  # run plan in the root directory passing the -target flag to terraform
  atlantis plan -d . -- -target=resource

  # apply all unapplied plans
  atlantis apply

  # apply the plan for the root directory and staging workspace
  atlantis apply -d . -w staging

Commands:
  plan   Runs 'terraform plan' for the changes in this pull request.
  apply  Runs 'terraform apply' on all unapplied plans.
  help   View help.

Flags:
  -h, --help   help for atlantis
```"""


class MarkdownRenderer:
    def render(self, result: CommandResult, command_name: CommandName) -> str:
        title = command_name.title_string()
        if result.error:
            return _render_error(title, result.error)
        if result.failure:
            return f"**{title} Failed**: {result.failure}"

        projects = result.project_results
        if not projects:
            return f"Ran {title} for 0 projects. No projects matched this command."
        if len(projects) == 1:
            project = projects[0]
            return (
                f"Ran {title} in {project.heading}\n\n"
                f"{self.render_project(project, command_name)}"
            ).rstrip() + "\n"

        index = [f"1. {project.heading}" for project in projects]
        chunks = [f"Ran {title} for {len(projects)} projects:\n" + "\n".join(index)]
        for project in projects:
            body = self.render_project(project, command_name)
            chunks.append(f"### {project.heading}\n{body}\n\n---")
        return "\n\n".join(chunks).strip() + "\n"

    def render_project(self, project: ProjectResult, command_name: CommandName) -> str:
        title = command_name.title_string()
        if project.status is ResultStatus.ERROR:
            return _render_error(title, project.output)
        if project.status is ResultStatus.FAILURE:
            return f"**{title} Failed**: {project.output}"

        body = f"```diff\n{project.output.rstrip()}\n```"
        if command_name is CommandName.PLAN:
            body += (
                "\n\n* To **apply** this plan, comment:\n"
                f"    * `atlantis apply -d {project.repo_rel_dir} -w {project.workspace}`"
            )
        return body

    def render_help(self) -> str:
        return HELP_COMMENT


def _render_error(title: str, error: str) -> str:
    return f"**{title} Error**\n```\n{error.rstrip()}\n```"
