import pytest

from jsonldcore import jsonld


def pytest_addoption(parser):
    parser.addoption(
        '--loader',
        dest='loader',
        default='requests',
        help='The remote URL document loader: requests, aiohttp',
    )


def pytest_configure(config):
    # Register custom markers
    config.addinivalue_line(
        "markers", "network: marks tests as requiring network access (may be slow)"
    )


@pytest.fixture
def network_loader(request):
    """The remote document loader selected with --loader."""
    if request.config.getoption('loader') == 'aiohttp':
        pytest.importorskip('aiohttp')
        return jsonld.aiohttp_document_loader()
    pytest.importorskip('requests')
    return jsonld.requests_document_loader()


def static_loader(documents, context_urls=None):
    """
    Builds a document loader serving the given documents by URL.

    :param documents: a dict of URL to JSON document.
    :param [context_urls]: a dict of URL to the context URL its Link header
      would carry.

    :return: the loader, which records every requested URL in `calls`.
    """
    context_urls = context_urls or {}

    def loader(url, options=None):
        loader.calls.append(url)
        if url not in documents:
            raise Exception('Unknown URL: {}'.format(url))
        return {
            'contentType': 'application/ld+json',
            'contextUrl': context_urls.get(url),
            'documentUrl': url,
            'document': documents[url],
        }

    loader.calls = []
    return loader
