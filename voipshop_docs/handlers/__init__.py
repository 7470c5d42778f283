"""One module per public endpoint; every handler maps a Request to a Response."""
