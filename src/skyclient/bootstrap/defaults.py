"""Built-in configuration files written when a download fails."""

FILEBROWSER_SETTINGS = """\
{
  "port": 8080,
  "baseURL": "",
  "address": "",
  "log": "stdout",
  "database": "/database/filebrowser.db",
  "root": "/srv",
  "username": "admin",
  "password": "admin"
}
"""

DOCKER_COMPOSE = """\
version: '3.8'

services:
  filebrowser:
    image: filebrowser/filebrowser:latest
    container_name: filebrowser
    restart: unless-stopped
    ports:
      - "8080:80"
    volumes:
      - /home:/srv
      - ./filebrowser/config:/config
      - ./filebrowser/database:/database
    command: --config=/config/settings.json

  # Add other services as needed
"""

MAVLINK_ROUTER_CONF = """\
[General]
TcpServerPort=5760
ReportStats=false
MavlinkDialect=auto

[UartEndpoint uart]
Device=/dev/ttyUSB0
Baud=57600

[UdpEndpoint groundstation]
Mode=Normal
Address=127.0.0.1
Port=14550
"""
