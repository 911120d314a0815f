"""Host system queries used by check predicates: users, packages, file ownership."""

from .filesystem import (  # noqa: F401 – re-export for convenience
    file_owned_by_group,
    file_owned_by_user,
    get_file_group,
    get_file_owner,
)
from .packages import PackageQuery, is_package_installed  # noqa: F401
from .users import (  # noqa: F401
    UserQuery,
    group_exists,
    user_exists,
    user_in_group,
    user_is_admin,
)
