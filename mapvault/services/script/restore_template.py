"""PowerShell template for standalone restore scripts.

The structure is fixed; records only ever reach it through the ps_literal
filter. PowerShell braces are single, so they never collide with Jinja.
"""

RESTORE_SCRIPT_TEMPLATE = r"""# Restore-DriveMappings.ps1
# Generated: {{ generated_at }}
# Created by mapvault {{ version }} from {{ records|length }} drive mapping(s).
# Holds no credentials: stored credentials are looked up, or prompted for, at run time.
#Requires -Version 5.1

# --- Elevation bootstrap ---------------------------------------------------
$identity = [Security.Principal.WindowsIdentity]::GetCurrent()
$principal = New-Object Security.Principal.WindowsPrincipal($identity)
if (-not $principal.IsInRole([Security.Principal.WindowsBuiltInRole]::Administrator)) {
    Write-Host 'Restarting with administrative rights...'
    $arguments = @('-NoProfile', '-ExecutionPolicy', 'Bypass', '-File', ('"{0}"' -f $PSCommandPath))
    Start-Process -FilePath (Get-Process -Id $PID).Path -ArgumentList $arguments -Verb RunAs
    exit
}

# --- Credentials ------------------------------------------------------------
$script:CredentialCache = @{}
$script:PromptedHosts = @{}
$script:HasCredentialManager = [bool](Get-Module -ListAvailable -Name CredentialManager)
if ($script:HasCredentialManager) {
    Import-Module CredentialManager -ErrorAction SilentlyContinue
}

function Get-HostFromPath([string]$Path) {
    return ($Path.TrimStart('\') -split '\\')[0]
}

function Resolve-HostCredential([string]$HostName) {
    if ($script:CredentialCache.ContainsKey($HostName)) {
        return $script:CredentialCache[$HostName]
    }
    $credential = $null
    if ($script:HasCredentialManager) {
        $credential = Get-StoredCredential -Target $HostName -ErrorAction SilentlyContinue
    }
    if (-not $credential) {
        $script:PromptedHosts[$HostName] = $true
        $credential = Get-Credential -Message "Credentials for $HostName"
    }
    $script:CredentialCache[$HostName] = $credential
    return $credential
}

# --- Mapping ----------------------------------------------------------------
function Invoke-NetUse([string]$DriveLetter, [string]$RemotePath, [bool]$Persistent, $Credential) {
    $arguments = @('use')
    if ($DriveLetter) { $arguments += "$($DriveLetter):" }
    $arguments += $RemotePath
    if ($Credential) {
        $arguments += $Credential.GetNetworkCredential().Password
        $arguments += "/user:$($Credential.UserName)"
    }
    if ($DriveLetter) {
        if ($Persistent) { $arguments += '/persistent:yes' } else { $arguments += '/persistent:no' }
    }
    $output = & net.exe @arguments 2>&1
    return [pscustomobject]@{ Success = ($LASTEXITCODE -eq 0); Output = ($output | Out-String).Trim() }
}

function Test-MappingPresent([string]$DriveLetter, [string]$RemotePath) {
    if ($DriveLetter) {
        $existing = Get-SmbMapping -LocalPath "$($DriveLetter):" -ErrorAction SilentlyContinue
    } else {
        $existing = Get-SmbMapping -RemotePath $RemotePath -ErrorAction SilentlyContinue
    }
    return [bool]($existing | Where-Object { $_.RemotePath -eq $RemotePath })
}

$script:Applied = 0
$script:AlreadyMapped = 0
$script:Failed = 0

function Restore-DriveMapping {
    param(
        [string]$DriveLetter,
        [string]$RemotePath,
        [bool]$Persistent,
        [string]$Description
    )
    if ($DriveLetter) { $label = "$($DriveLetter): -> $RemotePath" } else { $label = $RemotePath }
    if ($Description) { $label = "$label ($Description)" }

    $attempt = Invoke-NetUse -DriveLetter $DriveLetter -RemotePath $RemotePath -Persistent $Persistent -Credential $null
    if ($attempt.Success) {
        Write-Host "[OK]      $label"
        $script:Applied++
        return
    }
    if (Test-MappingPresent -DriveLetter $DriveLetter -RemotePath $RemotePath) {
        Write-Host "[SKIP]    $label (already mapped)"
        $script:AlreadyMapped++
        return
    }

    $hostName = Get-HostFromPath $RemotePath
    $credential = Resolve-HostCredential $hostName
    if ($credential) {
        $attempt = Invoke-NetUse -DriveLetter $DriveLetter -RemotePath $RemotePath -Persistent $Persistent -Credential $credential
        if ($attempt.Success) {
            if ($script:PromptedHosts.ContainsKey($hostName) -and $script:HasCredentialManager) {
                New-StoredCredential -Target $hostName -UserName $credential.UserName -SecurePassword $credential.Password -Persist LocalMachine | Out-Null
            }
            Write-Host "[OK]      $label (as $($credential.UserName))"
            $script:Applied++
            return
        }
        if ($script:PromptedHosts.ContainsKey($hostName)) {
            # Rejected: do not ask again for this host in this run
            $script:CredentialCache[$hostName] = $null
        }
    }
    Write-Host "[FAILED]  $($label): $($attempt.Output)" -ForegroundColor Red
    $script:Failed++
}

# --- Mappings ---------------------------------------------------------------
{% for record in records %}
Restore-DriveMapping -DriveLetter {{ record.drive_letter|ps_literal }} -RemotePath {{ record.remote_path|ps_literal }} -Persistent {{ record.persistent|ps_literal }} -Description {{ record.description|ps_literal }}
{% endfor %}

Write-Host ('Drive mapping restore complete: {0} processed, {1} restored, {2} already mapped, {3} failed.' -f {{ records|length }}, $script:Applied, $script:AlreadyMapped, $script:Failed)
"""
