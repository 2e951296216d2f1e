"""
GovChain runtimes: the ledger-resident programs hosted by the node.

Import the submodules directly; this package stays empty so that the
storage and API layers can import a single runtime without the others.
"""
