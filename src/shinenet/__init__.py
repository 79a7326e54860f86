"""ShineNET VPN client core."""
