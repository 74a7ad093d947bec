# gh_importer/upsert.py
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from gh_importer.db import Repository, User, PullRequest, Review


def find_by_remote_id(session, model, github_id):
    return session.execute(
        select(model).where(model.github_id == github_id)
    ).scalar_one_or_none()


def _find_or_build(session, model, github_id):
    row = find_by_remote_id(session, model, github_id)
    if row is None:
        row = model(github_id=github_id)
        session.add(row)
    return row


def _commit(session, row):
    """Commit a single row. Constraint violations are fatal: roll back and re-raise."""
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    return row


def upsert_repository(session, repo):
    """Create or update a Repository row from a RepoRecord."""
    row = _find_or_build(session, Repository, repo.id)
    row.name = repo.name
    row.full_name = repo.full_name
    row.html_url = repo.html_url
    row.private = repo.private
    row.archived = repo.archived
    return _commit(session, row)


def upsert_user(session, user):
    """Create or update a User row. A missing (ghost) user yields None."""
    if user is None:
        return None
    row = _find_or_build(session, User, user.id)
    row.login = user.login
    row.html_url = user.html_url
    return _commit(session, row)


def _author_id(session, user):
    author = upsert_user(session, user)
    return author.id if author is not None else None


def upsert_pull_request(session, pr, repository_id):
    """Create or update a PullRequest row from a PRDetail under the given repository."""
    author_id = _author_id(session, pr.user)

    row = _find_or_build(session, PullRequest, pr.id)
    row.repository_id = repository_id
    row.number = pr.number
    row.title = pr.title
    row.state = pr.state
    row.updated_at_github = pr.updated_at
    row.closed_at = pr.closed_at
    row.merged_at = pr.merged_at
    row.author_id = author_id
    row.additions = pr.additions
    row.deletions = pr.deletions
    row.changed_files = pr.changed_files
    row.commits_count = pr.commits
    return _commit(session, row)


def upsert_review(session, review, pull_request_id):
    """Create or update a Review row under the given pull request."""
    author_id = _author_id(session, review.user)

    row = _find_or_build(session, Review, review.id)
    row.pull_request_id = pull_request_id
    row.author_id = author_id
    row.state = review.state
    row.submitted_at = review.submitted_at
    return _commit(session, row)
