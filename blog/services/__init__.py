# Services package.
#
# Each module exposes async functions holding the business logic and
# database access for one part of the blog:
#
#   article_service  — CRUD, category filter, search and cache for articles
#   comment_service  — comments scoped to an article
#   user_service     — CRUD for user accounts
#   auth_service     — registration and login
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.
