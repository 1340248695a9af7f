"""
Model Context Protocol (MCP) server for the reservation tools.

JSON-RPC 2.0 message handling, tool registry and the reservation tool
handlers. Transports (HTTP gateway, stdio) sit on top of ReservationsMCPServer.
"""
