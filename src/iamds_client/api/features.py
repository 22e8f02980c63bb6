from iamds_client.api.base import BaseApi, operation_method


class FeatureApi(BaseApi):
    """Client for feature endpoints."""

    create_feature = operation_method("CreateFeature")
    delete_feature = operation_method("DeleteFeature")
    get_feature = operation_method("GetFeature")
    list_feature_grants = operation_method("ListFeatureGrants")
    list_features = operation_method("ListFeatures")
    patch_feature = operation_method("PatchFeature")
    replace_feature = operation_method("ReplaceFeature")
