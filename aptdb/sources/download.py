"""Parallel download of the OurAirports source files."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Union

import requests

from ..config import DATA_FILES, DEFAULT_BASE_URL, DOWNLOAD_TIMEOUT, DOWNLOAD_CHUNK_SIZE, USER_AGENT
from ..exceptions import DownloadError

logger = logging.getLogger(__name__)


class DataDownloader:
    """
    Fetch the source files into a data directory.

    Each file is fetched with a plain HTTP GET on its own worker thread. The
    batch is all-or-nothing: the first failure is raised and the partially
    written file for that source is removed.

    Example:
        DataDownloader().download('data')
        AptDB.open('airports.db').load('data')
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, session: Optional[requests.Session] = None,
                 timeout: int = DOWNLOAD_TIMEOUT):
        """
        Args:
            base_url: URL the file names are appended to
            session: Optional requests.Session for dependency injection (testing)
            timeout: HTTP request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self._session = session or requests.Session()
        self._timeout = timeout
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def url_for(self, file_name: str) -> str:
        return f"{self.base_url}/{file_name}"

    def download(self, data_dir: Union[str, Path], files: Optional[List[str]] = None) -> List[Path]:
        """
        Download every file into data_dir, creating the directory if needed.

        Args:
            data_dir: Destination directory
            files: File names to fetch (defaults to the four source files)

        Returns:
            Paths of the downloaded files, in the order requested

        Raises:
            DownloadError: On the first non-200 response or transport/I/O error
        """
        files = list(DATA_FILES if files is None else files)
        data_dir = Path(data_dir)
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"cannot create data directory {data_dir}: {e}") from e

        targets = {name: data_dir / name for name in files}
        with ThreadPoolExecutor(max_workers=max(1, len(files))) as pool:
            futures = {pool.submit(self._download_file, self.url_for(name), target): name
                       for name, target in targets.items()}
            try:
                for future in as_completed(futures):
                    future.result()
                    logger.debug(f"Downloaded {futures[future]}")
            except DownloadError as e:
                for pending in futures:
                    pending.cancel()
                logger.error(f"Download aborted: {e}")
                raise

        logger.info(f"Downloaded {len(files)} files to {data_dir}")
        return [targets[name] for name in files]

    def _download_file(self, url: str, target: Path) -> Path:
        """Stream one URL to target, removing target on any failure."""
        logger.info(f"Downloading {url} to {target}")
        try:
            with self._session.get(url, stream=True, timeout=self._timeout) as response:
                if response.status_code != 200:
                    raise DownloadError(f"response code {response.status_code} for {url}",
                                        url=url, status_code=response.status_code)
                with open(target, 'wb') as f:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except DownloadError:
            self._remove_partial(target)
            raise
        except (requests.RequestException, OSError) as e:
            self._remove_partial(target)
            raise DownloadError(f"failed to download {url}: {e}", url=url) from e
        return target

    @staticmethod
    def _remove_partial(target: Path) -> None:
        try:
            target.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial download {target}: {e}")


def download_data(data_dir: Union[str, Path], base_url: str = DEFAULT_BASE_URL,
                  files: Optional[List[str]] = None,
                  session: Optional[requests.Session] = None,
                  timeout: int = DOWNLOAD_TIMEOUT) -> List[Path]:
    """Download the source files into data_dir. See DataDownloader.download()."""
    return DataDownloader(base_url, session=session, timeout=timeout).download(data_dir, files)
