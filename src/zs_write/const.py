ERRORS = {
  "E_PAYLOAD_SOURCE": "Payload source missing or unreadable",
  "E_PAYLOAD_CONFLICT": "Use either SOURCE or --text, not both",
  "E_TIMESTAMP": "Timestamp is not ISO-8601",
  "E_WRITE_IO": "Container could not be written",
  "E_LAYOUT": "Container layout rejected the input",
}
