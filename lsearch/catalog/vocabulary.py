"""
Module: vocabulary
Purpose: Keyword signals for category inference and tag extraction.
Dependencies: None (pure data, no imports)

Separates keyword policy from the matching code in classifier.py. Rule order
is significant: the first matching group wins, so networking sits ahead of
security and both sit ahead of files.
"""

# ---------------------------------------------------------------------------
# Parser / sync profile: English signals over command + description
# Patterns are matched against lower-cased text; trailing spaces in
# "ip ", "ls " etc. keep short words from matching inside longer ones.
# ---------------------------------------------------------------------------

PARSER_CATEGORY_RULES: tuple[tuple[str, str], ...] = (
    (
        "networking",
        r"network|ssh|http|port|ip |tcp|udp|dns|ping|curl|wget|netcat|traceroute",
    ),
    (
        "security",
        r"security|password|encrypt|scan|hack|exploit|vuln|pentest|crack|firewall"
        r"|nmap|metasploit|hydra|aircrack|wireshark|forensic",
    ),
    (
        "files",
        r"file|directory|folder|copy|move|delete|find|list|ls |cd |mkdir|rm |cp |mv |touch|ln ",
    ),
    ("process", r"process|pid|kill|cpu|memory|top|htop|ps |free |uptime"),
    (
        "text",
        r"text|string|pattern|grep|sed|awk|regex|cat |less|more|head|tail|cut|sort|uniq",
    ),
    ("permissions", r"permission|chmod|chown|access|owner|sudo"),
    ("disk", r"disk|storage|mount|partition|df |du "),
    ("users", r"user|account|group|login|passwd|useradd"),
    # Package managers have no category of their own
    ("system", r"package|apt|yum|dnf|snap|install"),
)

# ---------------------------------------------------------------------------
# Upload profile: bilingual English/Spanish signals, no permissions group
# ---------------------------------------------------------------------------

UPLOAD_CATEGORY_RULES: tuple[tuple[str, str], ...] = (
    (
        "networking",
        r"network|ssh|http|port|ip |tcp|udp|dns|ping|curl|wget|red|tráfico|conexi"
        r"|protocolo|servidor|cliente|interfaz",
    ),
    (
        "security",
        r"security|password|encrypt|firewall|hack|vuln|seguridad|contraseña|acceso"
        r"|bloquea|ataque|force|fuerza|bruta|fuzz|inyecci|injection|exploit"
        r"|penetración|auditoría|malware|virus|rootkit|troyano|backdoor|sniff|spoof|mitm",
    ),
    (
        "files",
        r"file|directory|folder|copy|move|archivo|directorio|carpeta|copia|mueve"
        r"|borra|elimina|lista|permiso|propietario",
    ),
    (
        "process",
        r"process|pid|kill|cpu|memory|proceso|memoria|ejecu|actividad|monitor|top|htop",
    ),
    (
        "text",
        r"text|string|pattern|grep|texto|patrón|cadena|línea|reemplaza|busca|filtra"
        r"|edita|cat |vi |nano",
    ),
    (
        "disk",
        r"disk|storage|mount|disco|almacenamiento|espacio|parti|format|monta"
        r"|sistema de ficheros",
    ),
    ("users", r"user|account|group|usuario|cuenta|grupo|sesión|login|sudo|root"),
)

# ---------------------------------------------------------------------------
# Tag vocabularies (substring match, output follows this order)
# ---------------------------------------------------------------------------

PARSER_TAG_VOCABULARY: tuple[str, ...] = (
    "network",
    "security",
    "file",
    "process",
    "text",
    "permission",
    "disk",
    "user",
    "linux",
    "bash",
    "shell",
    "server",
    "web",
    "http",
    "ssh",
    "firewall",
    "scan",
    "pentest",
    "docker",
    "forensic",
)

UPLOAD_TAG_VOCABULARY: tuple[str, ...] = (
    # Wireless
    "wifi",
    "wireless",
    "inalámbrica",
    "monitor",
    "packet",
    "paquete",
    # Attacks
    "injection",
    "inyección",
    "brute",
    "fuerza",
    "fuzzing",
    # Data
    "sql",
    "db",
    "database",
    # Web and transport
    "web",
    "http",
    "https",
    "ssl",
    "tls",
    "network",
    "red",
    # Audit
    "security",
    "seguridad",
    "audit",
    "auditoría",
    "scan",
    "escaneo",
    "vuln",
    "exploit",
    "password",
    "contraseña",
    "hash",
    "crack",
    # System
    "linux",
    "system",
    "sistema",
    "file",
    "archivo",
    "process",
    "proceso",
    "performance",
    "rendimiento",
)
