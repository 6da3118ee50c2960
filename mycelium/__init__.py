"""Mycelium proxy sync.

Keeps a Minecraft proxy's routing table in line with the control plane:
 - periodic fetch of the desired server list
 - register/unregister backends to match it
 - attempt order rebuilt by server priority
 - forced hosts rebuilt from each server's virtual host
 - churn and player-count gauges for Prometheus
"""
