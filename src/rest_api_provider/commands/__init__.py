"""Built-in commands of the ``rest-api-provider`` CLI.

* :mod:`~rest_api_provider.commands.init` -- write a starter settings file.
* :mod:`~rest_api_provider.commands.config` -- show the resolved configuration.
* :mod:`~rest_api_provider.commands.request` -- send one request through the
  library's request layer and print the decoded response.
"""
