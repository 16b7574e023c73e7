# products/views/_base.py

from rest_framework.permissions import IsAuthenticated

from permissions.roles import CAP_CATALOG_EDIT, HasCapability, IsStaff


class CatalogPermissionMixin:
    """
    Catalog policy:
    - Any staff member can READ (the POS grid needs it)
    - Only users with catalog.edit can CREATE/UPDATE/DELETE
    """

    read_actions = {"list", "retrieve"}

    def get_permissions(self):
        if self.action in self.read_actions:
            return [IsAuthenticated(), IsStaff()]

        self.required_capability = CAP_CATALOG_EDIT
        return [IsAuthenticated(), HasCapability()]
