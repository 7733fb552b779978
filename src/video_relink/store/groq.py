VIDEO_ASSETS_QUERY = """*[_type == "sanity.videoAsset"] {
  _id,
  _type,
  _rev,
  uploadId,
  originalFilename,
  size,
  media
}"""

# Matches published and draft references alike.
REFERENCING_DOCUMENTS_QUERY = """*[references($assetId) || references($draftAssetId)] {
  ...
}"""

MEDIA_LIBRARY_ASSET_QUERY = """*[_id == $assetId][0] {
  _id,
  "container": *[_type == "sanity.asset" && currentVersion._ref == $assetId][0] { _id, _type }
}"""

MEDIA_LIBRARY_ASSET_BY_TITLE_QUERY = """*[_type == "sanity.asset" && title == $title][0] {
  _id,
  currentVersion
}"""

POSTS_WITH_LEGACY_VIDEO_QUERY = """*[_type == "post" && defined(OldVideo) && !(_id in path("drafts.**"))] {
  _id,
  title,
  "filename": OldVideo.asset->originalFilename
}"""
