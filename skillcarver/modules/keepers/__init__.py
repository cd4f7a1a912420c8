from .extractor import ExtractOptions, extract, extract_tar_gz
from .path_policy import is_path_safe, resolve_entry_path, strip_components
from .downloaders import FetchResult, GitHubSource, download_tarball, fetch_skill, parse_github_url
